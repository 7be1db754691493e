"""Feature matrix generation.

The matrix for a package is the powerset of its seed features, with the
channel's ``always_include`` features added to every set and any set that
touches ``always_deny`` or is listed in ``skip`` removed.

The powerset has 2**n members for n seed features and is not pruned; seeds
are expected to hold tens of features at most. Subsets are produced lazily
so only the surviving sets are held in memory.
"""

from itertools import chain, combinations
from typing import Iterable, Iterator

from loguru import logger

from cargo_matrix.models.config import DEFAULT_CHANNEL, MatrixConfig
from cargo_matrix.models.feature import Feature, FeatureMatrix, FeatureSet
from cargo_matrix.models.package import Package

DEP_PREFIX = "dep:"
HIDDEN_PREFIX = "__"


def powerset(features: Iterable[Feature]) -> Iterator[FeatureSet]:
    """Yield every subset of ``features``, smallest first, including the empty set."""
    items = list(features)
    return (
        FeatureSet(subset)
        for subset in chain.from_iterable(combinations(items, r) for r in range(len(items) + 1))
    )


def find_implicits(package: Package) -> set[Feature]:
    """Return the features cargo would have synthesized for optional dependencies.

    A feature ``foo = ["dep:foo"]`` is implicit, unless ``dep:foo`` is also
    used by some other feature: cargo does not generate the implicit feature
    once a dependency is referenced with ``dep:`` syntax.
    """
    implicit: set[Feature] = set()
    referenced: set[Feature] = set()

    for feature, activations in package.features.items():
        for entry in activations:
            if not entry.startswith(DEP_PREFIX):
                continue
            dep = entry[len(DEP_PREFIX):]
            if len(activations) == 1 and dep == feature:
                implicit.add(Feature(feature))
            else:
                referenced.add(Feature(dep))

    return implicit - referenced


def extract_seed(package: Package, config: MatrixConfig, channel: str = DEFAULT_CHANNEL) -> FeatureSet:
    """Return the features whose powerset makes up the matrix."""
    seed = config.seed(channel)
    if seed is not None:
        return seed

    implicit = find_implicits(package)
    deny = config.always_deny(channel)
    include = config.always_include(channel)
    include_hidden = config.include_hidden(channel)

    universe = [
        Feature(name)
        for name in package.features
        if name != "default"
        and name not in implicit
        # denied features would all be filtered out anyway
        and name not in deny
        # always-included features are added back to every set later
        and name not in include
        and (include_hidden or not name.startswith(HIDDEN_PREFIX))
    ]

    if config.include_all_optional(channel):
        universe.extend(Feature(dep.feature_name) for dep in package.optional_dependencies())

    return FeatureSet(universe).union(config.include_optional(channel))


def generate(package: Package, config: MatrixConfig, channel: str = DEFAULT_CHANNEL) -> FeatureMatrix:
    """Compute the feature matrix for ``package`` under ``channel``.

    Raises:
        MissingDefaultChannelError: If ``config`` has no "default" channel
    """
    include = config.always_include(channel)
    deny = config.always_deny(channel)
    skip = config.skip(channel)

    seed = extract_seed(package, config, channel)
    logger.debug(f"{package.name}: seed features [{seed}] on channel '{channel}'")

    matrix = FeatureMatrix(
        feature_set
        for feature_set in (subset.union(include) for subset in powerset(seed))
        # seeds given explicitly bypass the deny filtering in extract_seed
        if feature_set.is_disjoint(deny) and feature_set not in skip
    )

    logger.debug(f"{package.name}: {len(matrix)} feature sets")
    return matrix

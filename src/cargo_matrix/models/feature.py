"""Feature, feature set and feature matrix value types.

All three are immutable and kept in canonical (sorted, deduplicated) form so
that equality, hashing and ordering are independent of how they were built.
"""

from functools import total_ordering
from typing import Iterable, Iterator, Union


class Feature(str):
    """A single cargo feature name.

    Equality and ordering are those of the underlying text.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Feature({str.__repr__(self)})"


@total_ordering
class FeatureSet:
    """A combination of features enabled together.

    Iterates in sorted order and renders as the comma-joined list cargo
    expects for ``-F``.
    """

    __slots__ = ("_members",)

    def __init__(self, features: Iterable[Union[str, Feature]] = ()):
        if isinstance(features, str):
            raise TypeError("FeatureSet expects an iterable of feature names, not a string")
        self._members: tuple[Feature, ...] = tuple(sorted({Feature(f) for f in features}))

    def union(self, *others: Iterable[Union[str, Feature]]) -> "FeatureSet":
        """Return a new set with the members of this set and all ``others``."""
        merged = list(self._members)
        for other in others:
            merged.extend(other)
        return FeatureSet(merged)

    def is_disjoint(self, other: Iterable[Union[str, Feature]]) -> bool:
        """True when this set shares no feature with ``other``."""
        return frozenset(self._members).isdisjoint(other)

    def issubset(self, other: Iterable[Union[str, Feature]]) -> bool:
        return frozenset(self._members).issubset(other)

    def to_list(self) -> list[str]:
        return [str(f) for f in self._members]

    def __or__(self, other: "FeatureSet") -> "FeatureSet":
        if not isinstance(other, FeatureSet):
            return NotImplemented
        return self.union(other)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureSet):
            return NotImplemented
        return self._members == other._members

    def __lt__(self, other: "FeatureSet") -> bool:
        if not isinstance(other, FeatureSet):
            return NotImplemented
        return self._members < other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __str__(self) -> str:
        return ",".join(self._members)

    def __repr__(self) -> str:
        return f"FeatureSet({self.to_list()!r})"


class FeatureMatrix:
    """The deduplicated, ordered collection of feature sets for one package."""

    __slots__ = ("_sets",)

    def __init__(self, sets: Iterable[Union[FeatureSet, Iterable[str]]] = ()):
        normalized = {s if isinstance(s, FeatureSet) else FeatureSet(s) for s in sets}
        self._sets: tuple[FeatureSet, ...] = tuple(sorted(normalized))

    def to_list(self) -> list[list[str]]:
        return [s.to_list() for s in self._sets]

    def __iter__(self) -> Iterator[FeatureSet]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __contains__(self, item: object) -> bool:
        return item in self._sets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureMatrix):
            return NotImplemented
        return self._sets == other._sets

    def __hash__(self) -> int:
        return hash(self._sets)

    def __repr__(self) -> str:
        return f"FeatureMatrix({self.to_list()!r})"

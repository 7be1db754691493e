"""Unit tests for feature matrix generation."""

import pytest

from cargo_matrix.config import build_matrix_config
from cargo_matrix.core.exceptions import MissingDefaultChannelError
from cargo_matrix.matrix.generator import extract_seed, find_implicits, generate, powerset
from cargo_matrix.models.config import Channel, MatrixConfig
from cargo_matrix.models.feature import FeatureMatrix, FeatureSet


def channel_config(**fields):
    """Config whose default channel sets ``fields``."""
    return build_matrix_config({"channel": [dict(name="default", **fields)]})


class TestPowerset:
    """Test powerset expansion."""

    def test_empty(self):
        assert list(powerset([])) == [FeatureSet()]

    def test_counts(self):
        assert len(list(powerset(["a", "b", "c", "d"]))) == 16

    def test_members(self):
        assert set(powerset(["a", "b"])) == {
            FeatureSet(), FeatureSet(["a"]), FeatureSet(["b"]), FeatureSet(["a", "b"]),
        }

    def test_is_lazy(self):
        subsets = powerset(["f%d" % i for i in range(40)])
        assert next(subsets) == FeatureSet()


class TestFindImplicits:
    """Test implicit feature classification."""

    def test_single_dep_feature_is_implicit(self, make_package):
        package = make_package(features={"a": ["dep:a"]})
        assert find_implicits(package) == {"a"}

    def test_dep_used_elsewhere_is_not_implicit(self, make_package):
        package = make_package(features={"a": ["dep:a"], "b": ["dep:a", "x"]})
        assert find_implicits(package) == set()

    def test_order_does_not_matter(self, make_package):
        package = make_package(features={"b": ["dep:a", "x"], "a": ["dep:a"]})
        assert find_implicits(package) == set()

    def test_other_shapes_are_not_implicit(self, make_package):
        package = make_package(features={
            "a": ["dep:b"],
            "c": ["dep:c", "serde/std"],
            "d": [],
            "e": ["d"],
        })
        assert find_implicits(package) == set()


class TestExtractSeed:
    """Test derivation of the seed universe."""

    def test_excludes_default_and_implicit(self, make_package):
        package = make_package(features={"default": ["x"], "x": [], "y": ["dep:y"]})
        assert extract_seed(package, MatrixConfig()) == FeatureSet(["x"])

    def test_excludes_deny_and_include(self, make_package):
        package = make_package(features={"a": [], "b": [], "c": []})
        config = channel_config(always_deny=["a"], always_include=["b"])
        assert extract_seed(package, config) == FeatureSet(["c"])

    def test_hidden_features(self, make_package):
        package = make_package(features={"__internal": [], "public": []})
        assert extract_seed(package, MatrixConfig()) == FeatureSet(["public"])
        assert extract_seed(package, channel_config(include_hidden=True)) == FeatureSet(
            ["__internal", "public"]
        )

    def test_include_all_optional_uses_rename(self, make_package):
        package = make_package(
            features={"a": []},
            dependencies=[
                {"name": "tokio", "optional": True},
                {"name": "serde_json", "optional": True, "rename": "json"},
                {"name": "log", "optional": False},
            ],
        )
        seed = extract_seed(package, channel_config(include_all_optional=True))
        assert seed == FeatureSet(["a", "json", "tokio"])

    def test_include_optional_is_independent(self, make_package):
        package = make_package(features={"a": []}, dependencies=[{"name": "tokio", "optional": True}])
        assert extract_seed(package, channel_config(include_optional=["tokio"])) == FeatureSet(
            ["a", "tokio"]
        )

    def test_seed_replaces_derivation(self, make_package):
        package = make_package(features={"a": [], "b": [], "__h": []})
        config = channel_config(seed=["__h", "z"], always_deny=["z"])
        assert extract_seed(package, config) == FeatureSet(["__h", "z"])

    def test_channel_seed(self, make_package):
        package = make_package(features={"a": [], "b": []})
        config = build_matrix_config({"channel": [{"name": "nightly", "seed": ["b"]}]})
        assert extract_seed(package, config, "nightly") == FeatureSet(["b"])
        assert extract_seed(package, config, "default") == FeatureSet(["a", "b"])


class TestGenerate:
    """Test full matrix generation."""

    def test_no_features(self, make_package):
        assert generate(make_package(), MatrixConfig()) == FeatureMatrix([[]])

    def test_implicit_dependency_feature_excluded(self, make_package):
        package = make_package(
            features={"x": [], "y": ["dep:y"]},
            dependencies=[{"name": "y", "optional": True}],
        )
        assert generate(package, MatrixConfig()).to_list() == [[], ["x"]]

    def test_full_powerset_in_canonical_order(self, make_package):
        package = make_package(features={"b": [], "a": []})
        assert generate(package, MatrixConfig()).to_list() == [[], ["a"], ["a", "b"], ["b"]]

    def test_always_include_added_everywhere(self, make_package):
        package = make_package(features={"a": [], "std": []})
        matrix = generate(package, channel_config(always_include=["std"]))
        assert matrix.to_list() == [["a", "std"], ["std"]]
        assert all(FeatureSet(["std"]).issubset(s) for s in matrix)

    def test_empty_universe_yields_include_set(self, make_package):
        matrix = generate(make_package(), channel_config(always_include=["std"]))
        assert matrix == FeatureMatrix([["std"]])

    def test_denied_include_set_gives_empty_matrix(self, make_package):
        config = channel_config(always_include=["std"], always_deny=["std"])
        assert generate(make_package(), config) == FeatureMatrix()

    def test_skipped_empty_set_gives_empty_matrix(self, make_package):
        assert generate(make_package(), channel_config(skip=[[]])) == FeatureMatrix()

    def test_deny_rechecked_for_explicit_seed(self, make_package):
        config = channel_config(seed=["a", "b"], always_deny=["b"])
        assert generate(make_package(), config).to_list() == [[], ["a"]]

    def test_skip_matches_whole_sets(self, make_package):
        package = make_package(features={"a": [], "b": []})
        matrix = generate(package, channel_config(skip=[["b", "a"], ["a"]]))
        assert matrix.to_list() == [[], ["b"]]

    def test_invariants(self, make_package):
        package = make_package(features={f: [] for f in "abcdef"})
        config = channel_config(
            always_include=["a"], always_deny=["f"], skip=[["a", "b"], ["a", "c", "d"]],
        )
        matrix = generate(package, config)

        assert len(matrix) == 2 ** 4 - 2
        for feature_set in matrix:
            assert "a" in feature_set
            assert "f" not in feature_set
            assert feature_set not in config.skip("default")

    def test_idempotent(self, make_package):
        package = make_package(features={"a": [], "b": ["a"], "c": ["dep:c"]})
        config = channel_config(always_include=["a"])
        assert generate(package, config) == generate(package, config)

    def test_channel_selection(self, make_package):
        package = make_package(features={"a": [], "b": []})
        config = build_matrix_config({"channel": [
            {"name": "default", "always_deny": ["b"]},
            {"name": "nightly", "always_deny": []},
        ]})
        assert len(generate(package, config, "default")) == 2
        assert len(generate(package, config, "nightly")) == 4
        assert generate(package, config, "stable") == generate(package, config, "default")

    def test_missing_default_channel(self, make_package):
        config = MatrixConfig(channel=[Channel(name="nightly")])
        with pytest.raises(MissingDefaultChannelError):
            generate(make_package(), config, "nightly")

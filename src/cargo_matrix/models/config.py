"""Matrix configuration models.

A configuration is an ordered list of named channels. Every field of a
channel is optional; an unset field falls back to the ``default`` channel
and then to the field's empty value.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cargo_matrix.core.exceptions import MissingDefaultChannelError
from cargo_matrix.models.feature import FeatureMatrix, FeatureSet

DEFAULT_CHANNEL = "default"

# Channel fields that can be resolved, with the value used when neither the
# requested channel nor "default" sets them.
_EMPTY_VALUES = {
    "seed": None,
    "always_include": FeatureSet(),
    "always_deny": FeatureSet(),
    "skip": FeatureMatrix(),
    "include_hidden": False,
    "include_all_optional": False,
    "include_optional": FeatureSet(),
}

CHANNEL_FIELDS = tuple(_EMPTY_VALUES)


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _to_feature_set(v: Any) -> Any:
    if v is None or isinstance(v, FeatureSet):
        return v
    if isinstance(v, str) or not isinstance(v, (list, tuple, set, frozenset)):
        raise ValueError("expected a list of feature names")
    if not all(isinstance(item, str) for item in v):
        raise ValueError("feature names must be strings")
    return FeatureSet(v)


class Channel(BaseModel):
    """A named layer of matrix generation rules."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=_kebab,
    )

    name: str = Field(description="Channel name, e.g. 'default' or 'nightly'")

    seed: Optional[FeatureSet] = Field(
        default=None,
        description="If set, only these features are used to construct the matrix",
    )
    always_include: Optional[FeatureSet] = Field(
        default=None, description="Features added to every feature set"
    )
    always_deny: Optional[FeatureSet] = Field(
        default=None, description="Feature sets containing any of these are dropped"
    )
    skip: Optional[FeatureMatrix] = Field(
        default=None, description="Exact feature sets dropped from the matrix"
    )
    include_hidden: Optional[bool] = Field(
        default=None, description="Include features prefixed with a double underscore"
    )
    include_all_optional: Optional[bool] = Field(
        default=None, description="Include a feature for every optional dependency"
    )
    include_optional: Optional[FeatureSet] = Field(
        default=None, description="Optional dependencies to include as features"
    )

    @field_validator("seed", "always_include", "always_deny", "include_optional", mode="before")
    @classmethod
    def validate_feature_set(cls, v: Any) -> Any:
        """Accept any list of feature names."""
        return _to_feature_set(v)

    @field_validator("skip", mode="before")
    @classmethod
    def validate_feature_matrix(cls, v: Any) -> Any:
        """Accept a list of lists of feature names."""
        if v is None or isinstance(v, FeatureMatrix):
            return v
        if isinstance(v, str) or not isinstance(v, (list, tuple)):
            raise ValueError("expected a list of feature sets")
        if any(item is None for item in v):
            raise ValueError("skip entries must be lists of feature names")
        return FeatureMatrix(_to_feature_set(item) for item in v)


class MatrixConfig(BaseModel):
    """Channels for one package, immutable once built."""

    model_config = ConfigDict(frozen=True)

    channel: list[Channel] = Field(
        default_factory=lambda: [Channel(name=DEFAULT_CHANNEL)],
        description="Configured channels, looked up by name",
    )

    def get_channel(self, name: str) -> Optional[Channel]:
        for channel in self.channel:
            if channel.name == name:
                return channel
        return None

    def get_default(self) -> Channel:
        default = self.get_channel(DEFAULT_CHANNEL)
        if default is None:
            raise MissingDefaultChannelError()
        return default

    def resolve(self, field: str, channel: str = DEFAULT_CHANNEL) -> Any:
        """Resolve ``field`` for ``channel``.

        Lookup order is the named channel (or "default" when it does not
        exist), then the "default" channel, then the field's empty value.

        Raises:
            MissingDefaultChannelError: If no "default" channel exists
            KeyError: If ``field`` is not a channel field
        """
        if field not in _EMPTY_VALUES:
            raise KeyError(field)

        default = self.get_default()
        for layer in (self.get_channel(channel) or default, default):
            value = getattr(layer, field)
            if value is not None:
                return value
        return _EMPTY_VALUES[field]

    def seed(self, channel: str) -> Optional[FeatureSet]:
        return self.resolve("seed", channel)

    def always_include(self, channel: str) -> FeatureSet:
        return self.resolve("always_include", channel)

    def always_deny(self, channel: str) -> FeatureSet:
        return self.resolve("always_deny", channel)

    def skip(self, channel: str) -> FeatureMatrix:
        return self.resolve("skip", channel)

    def include_hidden(self, channel: str) -> bool:
        return self.resolve("include_hidden", channel)

    def include_all_optional(self, channel: str) -> bool:
        return self.resolve("include_all_optional", channel)

    def include_optional(self, channel: str) -> FeatureSet:
        return self.resolve("include_optional", channel)

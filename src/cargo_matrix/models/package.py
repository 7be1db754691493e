"""Models for the subset of ``cargo metadata`` output cargo-matrix reads."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Reserved key under ``[package.metadata]`` holding per-package configuration.
METADATA_NAMESPACE = "cargo-matrix"


class Dependency(BaseModel):
    """A declared dependency of a package."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(description="Dependency crate name")
    optional: bool = Field(default=False, description="Declared with optional = true")
    rename: Optional[str] = Field(default=None, description="Name given with package = ...")

    @property
    def feature_name(self) -> str:
        """Name of the feature cargo would synthesize for this dependency."""
        return self.rename or self.name


class Package(BaseModel):
    """A workspace package and its declared features."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default="", description="Opaque cargo package id")
    name: str = Field(description="Package name")
    version: str = Field(default="0.0.0", description="Package version")
    features: dict[str, list[str]] = Field(
        default_factory=dict, description="Feature name to activation list"
    )
    dependencies: list[Dependency] = Field(default_factory=list)
    manifest_path: Optional[str] = Field(default=None)
    metadata: Optional[dict[str, Any]] = Field(
        default=None, description="Free-form [package.metadata] table"
    )

    @property
    def matrix_config(self) -> Optional[Any]:
        """The cargo-matrix configuration blob, if the package has one."""
        if not self.metadata:
            return None
        return self.metadata.get(METADATA_NAMESPACE)

    def optional_dependencies(self) -> list[Dependency]:
        return [dep for dep in self.dependencies if dep.optional]


class WorkspaceMetadata(BaseModel):
    """Top level ``cargo metadata --format-version 1`` document."""

    model_config = ConfigDict(extra="ignore")

    packages: list[Package] = Field(default_factory=list)
    workspace_members: list[str] = Field(default_factory=list)
    workspace_root: Optional[str] = Field(default=None)

    def members(self) -> list[Package]:
        """Packages that are members of the workspace, in metadata order."""
        member_ids = set(self.workspace_members)
        return [package for package in self.packages if package.id in member_ids]

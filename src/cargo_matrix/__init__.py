"""
cargo-matrix

Builds, checks and tests every package of a cargo workspace against each
combination of its feature flags.
"""

try:
    from importlib.metadata import version, PackageNotFoundError
    __version__ = version("cargo-matrix")
except PackageNotFoundError:
    # Package is not installed, use development version
    __version__ = "0.0.0+dev"

__author__ = "cargo-matrix developers"

__all__ = ["__version__"]

"""Command line interface for cargo-matrix."""

"""release-util: release automation for Cargo workspaces."""

__version__ = "0.1.0"

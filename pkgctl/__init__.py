"""pkgctl — orchestrate per-target version, install and update scripts."""

__version__ = "0.1.0"

"""
capwire.version
---------------

Package version. The catalog is part of the wire contract, so any change to
a schema type or operation name bumps at least the minor version.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _dist_version

# Bump this on intentional, user-visible releases/changes.
_SEMVER_BASE = "0.1.0"


def version() -> str:
    """Installed distribution version, or the source tree's base version."""
    try:
        return _dist_version("capwire")
    except PackageNotFoundError:
        return _SEMVER_BASE


__version__ = version()

__all__ = ["__version__", "version"]

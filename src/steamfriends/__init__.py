"""Cache of Steam friend relationships for game servers."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

__version__: str
"""The version string of steamfriends (PEP 440 / SemVer compatible)."""

try:
    __version__ = version("steamfriends")
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"

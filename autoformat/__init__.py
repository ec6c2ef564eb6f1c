"""Content negotiation and dual JSON/HTML rendering for FastAPI services."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("autoformat")
except PackageNotFoundError:
    __version__ = "dev"

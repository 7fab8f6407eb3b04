"""The current version of swiftmfv."""

__version__ = "0.3.0"

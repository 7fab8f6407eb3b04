"""
Metadata describing how particle fields are stored.

This currently covers the unit-conversion tags attached to fields and the
names of the unit attributes stored in files.
"""

from . import unit

__all__ = ["unit"]

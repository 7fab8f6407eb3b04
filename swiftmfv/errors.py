"""
Exceptions raised when required input is missing.

Both derive from ``KeyError`` so that callers treating a missing entry as a
lookup failure keep working; the subclasses let a driver tell a bad
parameter file apart from an incomplete dataset.
"""


class MissingParameterError(KeyError):
    """A compulsory parameter is absent from the parameter file."""


class FieldNotFoundError(KeyError):
    """A compulsory field is absent from the dataset being read."""

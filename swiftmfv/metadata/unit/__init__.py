"""Unit-conversion tags and the unit attributes stored in files."""

from .unit_types import (
    unit_attributes,
    named_base_units,
    dimension_of_attribute,
    base_unit_from_cgs,
)
from .unit_fields import (
    unit_conversions,
    get_unit_exponents,
    generate_units,
    generate_dimensions,
)

__all__ = [
    "unit_attributes",
    "named_base_units",
    "dimension_of_attribute",
    "base_unit_from_cgs",
    "unit_conversions",
    "get_unit_exponents",
    "generate_units",
    "generate_dimensions",
]

# ==== DESTINATION COUNTRIES AND PRICING TABLE ==== #

"""
Destination countries and the shipping pricing table for Boxship.

This module defines the closed set of destination codes and the static
per-kilogram multiplier for each of them. The table is immutable after
import. Lookups used for cost computation are strict, lookups used for
display fall back to the raw code.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from boxship.business.errors import UnknownDestination


# ==== ENUMERATION DEFINITIONS ==== #


class DestinationCountry(str, Enum):
    """
    Destination codes a box can be shipped to.

    The value doubles as the code stored on box records.
    """

    SWEDEN = "SWEDEN"
    CHINA = "CHINA"
    BRAZIL = "BRAZIL"
    AUSTRALIA = "AUSTRALIA"


@dataclass(frozen=True)
class CountryOption:
    """Pricing entry for one destination."""

    code: DestinationCountry
    name: str
    multiplier: float  # currency per kg


CountryCode = Union[DestinationCountry, str]


# ==== PRICING TABLE ==== #


_COUNTRY_OPTIONS: Tuple[CountryOption, ...] = (
    CountryOption(DestinationCountry.SWEDEN, "Sweden", 7.35),
    CountryOption(DestinationCountry.CHINA, "China", 11.53),
    CountryOption(DestinationCountry.BRAZIL, "Brazil", 15.63),
    CountryOption(DestinationCountry.AUSTRALIA, "Australia", 50.09),
)

PRICING_TABLE: Mapping[str, CountryOption] = MappingProxyType(
    {option.code.value: option for option in _COUNTRY_OPTIONS}
)


# ==== LOOKUP FUNCTIONS ==== #


def _code_key(code: object) -> Optional[str]:
    if isinstance(code, DestinationCountry):
        return code.value
    if isinstance(code, str):
        return code
    return None


def list_countries() -> Tuple[CountryOption, ...]:
    """Return every destination option in table order."""
    return _COUNTRY_OPTIONS


def lookup(code: CountryCode) -> Optional[CountryOption]:
    """
    Find the pricing entry for a destination code.

    Args:
        code (CountryCode): Enum member or raw string code

    Returns:
        Optional[CountryOption]: Matching entry, or None when the code is unknown
    """
    key = _code_key(code)
    if key is None:
        return None
    return PRICING_TABLE.get(key)


def get_country(code: CountryCode) -> CountryOption:
    """
    Strict variant of :func:`lookup` used for cost computation.

    Raises:
        UnknownDestination: If the code is not in the pricing table
    """
    option = lookup(code)
    if option is None:
        raise UnknownDestination(code)
    return option


def is_known(code: CountryCode) -> bool:
    """Check whether a code is present in the pricing table."""
    return lookup(code) is not None


def display_name(code: CountryCode) -> str:
    """
    Get the display name for a destination code.

    Unknown codes are returned as-is so a corrupted record can still be
    rendered.
    """
    option = lookup(code)
    if option is not None:
        return option.name
    return str(code)

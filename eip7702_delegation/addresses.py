"""Address format checks applied before anything reaches the chain."""
from __future__ import annotations

import re
from typing import Iterable, List, Tuple

from .errors import InvalidAddressFormatError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_valid_address(value: str) -> bool:
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def validate_address(value: str) -> str:
    """Return ``value`` unchanged when it is ``0x`` followed by 40 hex digits.

    Raises:
        InvalidAddressFormatError: If the value does not match the pattern.
    """

    if not is_valid_address(value):
        raise InvalidAddressFormatError(f"Invalid address format: {value}")
    return value


def is_zero_address(value: str) -> bool:
    return value.lower() == ZERO_ADDRESS


def partition_addresses(values: Iterable[str]) -> Tuple[List[str], List[InvalidAddressFormatError]]:
    """Split ``values`` into valid addresses and the errors for rejected ones.

    Input order is preserved on both sides and duplicates are kept.
    """

    valid: List[str] = []
    rejected: List[InvalidAddressFormatError] = []
    for value in values:
        try:
            valid.append(validate_address(value))
        except InvalidAddressFormatError as exc:
            rejected.append(exc)
    return valid, rejected


__all__ = [
    "ADDRESS_PATTERN",
    "ZERO_ADDRESS",
    "is_valid_address",
    "is_zero_address",
    "partition_addresses",
    "validate_address",
]

"""Hex address helpers.

Addresses are 0x-prefixed, 40 hex digit strings. They are compared
case-insensitively and stored lowercased.
"""

import re
from typing import Any

ZERO_ADDRESS = "0x" + "0" * 40

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def normalize_address(value: str) -> str:
    """Lowercase a hex address, raising ValueError if it is malformed."""
    if not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return value.lower()


def is_zero_address(value: str) -> bool:
    return value.lower() == ZERO_ADDRESS

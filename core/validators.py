# PATH: core/validators.py
"""
Address validators for swaplens.

CONTRACTS:
- is_valid_address(): never raises, True only for base58 strings that decode
  to exactly 32 bytes
- require_address(): same check, raises InvalidAddressError with a label
"""

import re

import base58

from core.exceptions import InvalidAddressError

# Base58 alphabet (no 0, O, I, l); a 32-byte key encodes to 32-44 chars
BASE58_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
ADDRESS_BYTES = 32


def is_valid_address(address: object) -> bool:
    """Check that address is a base58-encoded 32-byte public key."""
    if not isinstance(address, str) or not BASE58_PATTERN.match(address):
        return False
    try:
        return len(base58.b58decode(address)) == ADDRESS_BYTES
    except ValueError:
        return False


def require_address(address: object, label: str = "address") -> str:
    """Return address unchanged, or raise InvalidAddressError."""
    if not is_valid_address(address):
        raise InvalidAddressError(
            f"Bad {label}: {address!r}",
            details={"label": label, "value": str(address)},
        )
    return address  # type: ignore[return-value]

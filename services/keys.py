# services/keys.py
"""
Identity keys for imported entities.

Shopping centers and tenants are deduplicated by a normalized form of their
names; spaces by their center key plus suite number.
"""

import re
from typing import Optional

from services import RowValidationError

_WHITESPACE_RE = re.compile(r'\s+')

SPACE_KEY_SEPARATOR = '::'


def collapse_whitespace(value: Optional[str]) -> str:
    """Trim a string and collapse internal whitespace runs to one space."""
    if value is None:
        return ''
    return _WHITESPACE_RE.sub(' ', str(value)).strip()


def center_key(name: Optional[str]) -> str:
    """
    Normalized identity key for a shopping center name.

    Raises:
        RowValidationError: if the name is empty after trimming
    """
    key = collapse_whitespace(name).lower()
    if not key:
        raise RowValidationError("shopping_center_name is required")
    return key


def space_key(center: str, suite_number: Optional[str]) -> Optional[str]:
    """
    Identity key for a space, or None when the row carries no suite number.

    None means the space is never deduplicated: every such row gets a new
    Space.
    """
    suite = (suite_number or '').strip()
    if not suite:
        return None
    return f"{center}{SPACE_KEY_SEPARATOR}{suite}"


def tenant_key(name: str) -> str:
    """Global identity key for a (normalized) tenant name."""
    return collapse_whitespace(name).lower()

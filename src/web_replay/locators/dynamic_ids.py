"""
Dynamic ID detection.

Ids generated by UI libraries or per-render counters are not stable across
sessions. They are kept out of both ``id`` locators and generated CSS/XPath.
"""

import re

# Library-generated prefixes (react-select-3-input, mui-12, :r5:, ...)
_DYNAMIC_PREFIXES = re.compile(
    r"^(?:react-select|mui-|chakra-|rc-|radix-|headlessui-|ember\d|:r[0-9a-z]*:|yui_|ext-gen|gwt-uid)",
    re.IGNORECASE,
)

_UUID = re.compile(
    r"[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}",
    re.IGNORECASE,
)

_PURE_NUMBER = re.compile(r"^\d+$")

# Alphanumeric runs between separators
_TOKEN_SPLIT = re.compile(r"[^0-9A-Za-z]+")

_HEX_RUN = re.compile(r"^[0-9a-f]{8,}$", re.IGNORECASE)

LONG_TOKEN_LENGTH = 20
MIXED_TOKEN_LENGTH = 12


def _is_random_token(token: str) -> bool:
    if len(token) >= LONG_TOKEN_LENGTH:
        return True

    digits = sum(ch.isdigit() for ch in token)
    letters = len(token) - digits
    if digits == 0 or letters == 0:
        return False

    if _HEX_RUN.match(token):
        return True
    return len(token) >= MIXED_TOKEN_LENGTH and digits >= 2


def is_dynamic_id(value: str | None) -> bool:
    """
    Heuristically decide whether an id was generated at runtime.

    Matches library prefixes (``react-select``, ``mui-``, ``chakra-``, ``rc-``
    and friends), UUID-shaped strings, purely numeric ids, alphanumeric
    tokens of 20+ characters, hex runs of 8+ characters mixing letters and
    digits, and long letter/digit mixes such as ``a1b2c3d4e5f6g7h8``.

    Args:
        value: The id attribute value

    Returns:
        True if the id should not be relied upon
    """
    if not value:
        return False

    value = value.strip()
    if _DYNAMIC_PREFIXES.match(value):
        return True
    if _UUID.search(value):
        return True
    if _PURE_NUMBER.match(value):
        return True

    return any(_is_random_token(token) for token in _TOKEN_SPLIT.split(value) if token)

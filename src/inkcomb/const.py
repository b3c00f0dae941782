"""
ASCII character classes, usable with `one_of()`.
"""

from __future__ import annotations
from typing import Final

import string

WHITESPACES: Final[frozenset[str]] = frozenset(" \t\n\r\f\v")
DECIMAL: Final[frozenset[str]] = frozenset(string.digits)
HEXADECIMAL: Final[frozenset[str]] = frozenset(string.hexdigits)
ALPHABETIC: Final[frozenset[str]] = frozenset(string.ascii_letters)
ALNUM: Final[frozenset[str]] = ALPHABETIC | DECIMAL

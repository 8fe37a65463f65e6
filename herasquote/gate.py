"""PIN gate restricting the quote page.

The flag lives in an explicit :class:`AccessGate` object. The web layer
builds one per request from a cookie so the login survives a reload.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from herasquote.settings import get_settings

logger = logging.getLogger(__name__)

AUTHED_COOKIE_VALUE = "1"

_NON_DIGITS = re.compile(r"\D")


def normalise_pin(value: Optional[str]) -> str:
    """Drop everything that is not a digit."""
    return _NON_DIGITS.sub("", value or "").strip()


def validate_pin(value: Optional[str], expected: Optional[str] = None) -> bool:
    if expected is None:
        expected = get_settings().demo_pin
    return normalise_pin(value) == expected


class AccessGate:
    """Session-scoped access flag."""

    def __init__(self, authed: bool = False, pin: Optional[str] = None):
        self.authed = authed
        self.error = ""
        self._pin = pin if pin is not None else get_settings().demo_pin

    @classmethod
    def from_cookie(cls, value: Optional[str], pin: Optional[str] = None) -> "AccessGate":
        return cls(authed=value == AUTHED_COOKIE_VALUE, pin=pin)

    @property
    def cookie_value(self) -> Optional[str]:
        """Cookie value to persist, or None when the cookie should be cleared."""
        return AUTHED_COOKIE_VALUE if self.authed else None

    def login(self, pin: Optional[str]) -> bool:
        if validate_pin(pin, self._pin):
            self.authed = True
            self.error = ""
            logger.info("Access gate opened")
            return True
        self.error = f"Incorrect PIN. Try {self._pin} for the demo."
        logger.info("Access gate rejected PIN")
        return False

    def logout(self) -> None:
        self.authed = False
        self.error = ""


__all__ = ["AUTHED_COOKIE_VALUE", "AccessGate", "normalise_pin", "validate_pin"]

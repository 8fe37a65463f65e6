"""Form validation for the quick-setup page."""

from __future__ import annotations

import re

from herasquote.errors import InputError
from herasquote.schemas import SiteInput

PROJECT_NAME_REQUIRED = "Project name is required."
POSTCODE_INVALID = "Enter a valid UK postcode (e.g., SW4 6QD)."

_UK_POSTCODE = re.compile(r"^[A-Za-z]{1,2}\d[A-Za-z\d]?\s*\d[A-Za-z]{2}$")


def is_valid_postcode(postcode: str) -> bool:
    """Loose UK postcode format check (outward + inward code)."""
    return bool(_UK_POSTCODE.match((postcode or "").strip()))


def validate_site(site: SiteInput) -> dict[str, str]:
    """Return field -> message for every invalid field (empty when valid)."""
    errors: dict[str, str] = {}
    if not site.project_name.strip():
        errors["project_name"] = PROJECT_NAME_REQUIRED
    if not is_valid_postcode(site.postcode):
        errors["postcode"] = POSTCODE_INVALID
    return errors


def check_site(site: SiteInput) -> None:
    """
    Validate a submission.

    Raises:
        InputError: with the per-field messages when any field is invalid
    """
    errors = validate_site(site)
    if errors:
        raise InputError(errors)


__all__ = [
    "PROJECT_NAME_REQUIRED",
    "POSTCODE_INVALID",
    "check_site",
    "is_valid_postcode",
    "validate_site",
]

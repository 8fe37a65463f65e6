"""Tests for the PIN gate and form validation."""

import pytest

from herasquote.gate import AUTHED_COOKIE_VALUE, AccessGate, normalise_pin, validate_pin
from herasquote.schemas import SiteInput
from herasquote.validation import (
    POSTCODE_INVALID,
    PROJECT_NAME_REQUIRED,
    is_valid_postcode,
    validate_site,
)


class TestGate:
    def test_normalise_pin(self):
        assert normalise_pin(" 12-34 ") == "1234"
        assert normalise_pin(None) == ""

    def test_validate_pin_uses_configured_default(self):
        assert validate_pin("1234")
        assert not validate_pin("0000")

    def test_login_and_logout(self):
        gate = AccessGate()
        assert not gate.authed
        assert gate.cookie_value is None

        assert gate.login("1 2 3 4")
        assert gate.authed
        assert gate.cookie_value == AUTHED_COOKIE_VALUE

        gate.logout()
        assert not gate.authed
        assert gate.cookie_value is None

    def test_wrong_pin_sets_error(self):
        gate = AccessGate(pin="4321")
        assert not gate.login("1234")
        assert gate.error == "Incorrect PIN. Try 4321 for the demo."
        assert gate.login("4321")
        assert gate.error == ""

    def test_from_cookie(self):
        assert AccessGate.from_cookie(AUTHED_COOKIE_VALUE).authed
        assert not AccessGate.from_cookie(None).authed
        assert not AccessGate.from_cookie("yes").authed


class TestValidation:
    @pytest.mark.parametrize(
        "postcode",
        ["SW4 6QD", "sw46qd", "EC1A 1BB", "W1A 0AX", "M1 1AE", " B2 2BB "],
    )
    def test_valid_postcodes(self, postcode):
        assert is_valid_postcode(postcode)

    @pytest.mark.parametrize("postcode", ["", "12345", "SW4", "SW4 6Q", "SWW4 6QD"])
    def test_invalid_postcodes(self, postcode):
        assert not is_valid_postcode(postcode)

    def test_validate_site(self):
        assert validate_site(SiteInput(project_name="Job", postcode="SW4 6QD")) == {}
        errors = validate_site(SiteInput(project_name="  ", postcode="nope"))
        assert errors == {
            "project_name": PROJECT_NAME_REQUIRED,
            "postcode": POSTCODE_INVALID,
        }

import pytest

from security.password_policy import validate_password
from utils.errors import ValidationError
from utils.validation import is_valid_email, parse_bool, parse_id, parse_price, pick


@pytest.mark.parametrize("email,expected", [
    ("a@x.com", True),
    ("first.last@sub.example.org", True),
    ("a@x", False),
    ("a x@y.com", False),
    ("", False),
    (None, False),
])
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


def test_parse_price():
    assert parse_price("12.345", "price") == 12.35
    assert parse_price(None, "price") is None
    assert parse_price("", "price") is None
    for bad in ("abc", -1, True, "nan"):
        with pytest.raises(ValidationError):
            parse_price(bad, "price")


def test_parse_bool():
    assert parse_bool("true", "flag") is True
    assert parse_bool("0", "flag") is False
    assert parse_bool(None, "flag") is False
    with pytest.raises(ValidationError):
        parse_bool("maybe", "flag")


def test_parse_id():
    assert parse_id("7", "id") == 7
    for bad in ("x", 0, None, False):
        with pytest.raises(ValidationError):
            parse_id(bad, "id")


def test_pick_prefers_first_present_name():
    assert pick({"appID": "1", "app_id": "2"}, "appID", "app_id") == "1"
    assert pick({"app_id": "2"}, "appID", "app_id") == "2"
    assert pick({}, "appID") is None


def test_password_policy_outside_app_context():
    assert validate_password("secret1") == (True, [])
    ok, errors = validate_password("abc")
    assert not ok
    assert errors == ["Password must be at least 6 characters"]
    assert validate_password("é" * 40)[0] is False

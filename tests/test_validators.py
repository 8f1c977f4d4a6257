from types import SimpleNamespace

import pytest

from valentino.shared.validators import (
    cents_to_dollars,
    dollars_to_cents,
    is_valid_email,
    missing_fields,
)
from valentino.utils.sanitization import sanitize_attributes, sanitize_string


@pytest.mark.parametrize(
    "email,expected",
    [
        ("a@b.com", True),
        ("first.last+tag@sub.example.org", True),
        ("a@b", False),
        ("@b.com", False),
        ("a b@c.com", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


def test_missing_fields_treats_blank_strings_as_missing():
    data = SimpleNamespace(name="A", email="  ", phone=None)

    assert missing_fields(data, ("name", "email", "phone", "address")) == [
        "email",
        "phone",
        "address",
    ]


@pytest.mark.parametrize(
    "price,cents",
    [(19.99, 1999), ("19.99", 1999), (0, 0), (5, 500), ("0.005", 1), (0.125, 13), (" 2.50 ", 250)],
)
def test_dollars_to_cents(price, cents):
    assert dollars_to_cents(price) == cents


@pytest.mark.parametrize("price", [None, True, "abc", "", "nan", "inf", [1]])
def test_dollars_to_cents_rejects_non_numbers(price):
    with pytest.raises(ValueError, match="Price must be a number"):
        dollars_to_cents(price)


def test_dollars_to_cents_rejects_negative():
    with pytest.raises(ValueError, match="must not be negative"):
        dollars_to_cents(-0.01)


@pytest.mark.parametrize("price", [1e17, "92233720368547758.08", "1e30", "1e999999"])
def test_dollars_to_cents_rejects_amounts_too_large_to_store(price):
    with pytest.raises(ValueError, match="Price is too large"):
        dollars_to_cents(price)


def test_dollars_to_cents_accepts_largest_storable_amount():
    assert dollars_to_cents("92233720368547758.07") == 2**63 - 1


def test_cents_to_dollars():
    assert cents_to_dollars(1999) == 19.99
    assert cents_to_dollars(0) == 0
    assert cents_to_dollars(None) is None


def test_sanitize_string_escapes_html():
    assert sanitize_string('<b>"Oak" & Elm</b>') == "&lt;b&gt;&quot;Oak&quot; &amp; Elm&lt;/b&gt;"
    assert sanitize_string(None) is None


def test_sanitize_attributes():
    appointment = SimpleNamespace(name="<Ann>", message=None)

    assert sanitize_attributes(appointment, ("name", "message")) == {
        "name": "&lt;Ann&gt;",
        "message": None,
    }

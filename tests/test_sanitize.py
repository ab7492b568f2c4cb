import pytest

from bakery_pos.services.sanitize import sanitize_customer_name, sanitize_text


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Alice  ", "Alice"),
        ("<script>alert(1)</script>Bob", "alert1Bob"),
        ("José-María", "José-María"),
        ("Mr. O'Brien, Jr.", "Mr. O'Brien, Jr."),
        ("", ""),
        (None, ""),
    ],
)
def test_sanitize_customer_name(raw, expected):
    assert sanitize_customer_name(raw) == expected


def test_customer_name_is_truncated():
    assert len(sanitize_customer_name("a" * 300)) == 255


def test_sanitize_text_strips_handlers():
    assert sanitize_text('x onclick="steal()" javascript:y\0') == 'x "steal()" y'

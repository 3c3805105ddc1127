from unittest import mock

import pytest

from utils.ui_inputs import parse_locale_number, parse_numeric_series


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("1 200 000", 1_200_000.0),
        ("1 200 000", 1_200_000.0),
        ("1,10", 1.10),
        ("1.10", 1.10),
        ("1,200.5", 1200.5),
    ],
)
def test_parse_locale_number(token: str, expected: float) -> None:
    assert parse_locale_number(token) == pytest.approx(expected)


def test_parse_numeric_series_splits_on_semicolons_and_newlines() -> None:
    assert parse_numeric_series("Values", "100; 200\n300;;") == [100.0, 200.0, 300.0]


def test_parse_numeric_series_reports_bad_entry() -> None:
    with mock.patch("utils.ui_inputs.st.error") as error:
        with pytest.raises(ValueError):
            parse_numeric_series("Custom values", "100; abc")

    error.assert_called_once()
    assert "abc" in error.call_args[0][0]

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from commerce_core.money import round_money
from commerce_core.parsers import DateParser, MoneyParser


class TestDateParser:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-01-05T10:30:00", datetime(2024, 1, 5, 10, 30)),
            ("2024-01-05T10:30:00Z", datetime(2024, 1, 5, 10, 30)),
            ("2024-01-05T12:30:00+02:00", datetime(2024, 1, 5, 10, 30)),
            ("2024-01-05", datetime(2024, 1, 5)),
            ("2024/01/05", datetime(2024, 1, 5)),
            ("01/05/2024", datetime(2024, 1, 5)),
        ],
    )
    def test_formats(self, value, expected):
        assert DateParser().parse(value) == expected

    def test_aware_datetime_converted_to_utc(self):
        moment = datetime(2024, 1, 5, 5, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert DateParser().parse(moment) == datetime(2024, 1, 5, 10, 0)

    @pytest.mark.parametrize("value", [None, "", "not a date", float("nan")])
    def test_unparseable(self, value):
        assert DateParser().parse(value) is None

    def test_parse_series(self):
        parsed = DateParser().parse_series(pd.Series(["2024-01-05", None, "garbage"]))

        assert pd.api.types.is_datetime64_any_dtype(parsed)
        assert parsed.iloc[0] == pd.Timestamp("2024-01-05")
        assert parsed.isna().tolist() == [False, True, True]


class TestMoneyParser:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("129.90", 129.9),
            ("$1,299.00", 1299.0),
            (12, 12.0),
            ("-3.5", -3.5),
        ],
    )
    def test_amounts(self, value, expected):
        assert MoneyParser().parse(value) == expected

    @pytest.mark.parametrize("value", [None, "", "$", float("nan")])
    def test_missing_uses_default(self, value):
        assert MoneyParser(default=0.0).parse(value) == 0.0
        assert MoneyParser(default=None).parse(value) is None

    def test_parse_series(self):
        parsed = MoneyParser(default=0.0).parse_series(pd.Series(["1.50", None, "2"]))
        assert parsed.tolist() == [1.5, 0.0, 2.0]


class TestRoundMoney:
    def test_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(0.125) == 0.13
        assert round_money(30.333333) == 30.33

    def test_missing_is_zero(self):
        assert round_money(None) == 0.0
        assert round_money(float("nan")) == 0.0

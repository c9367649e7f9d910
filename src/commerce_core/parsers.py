"""
Parsers for the raw values found in marketplace exports.

Exports come straight out of the ORM, so:
- timestamps are ISO strings, sometimes with a trailing Z or an offset
- money columns are DECIMAL values serialized as strings ("129.90")
- nullable surcharges arrive as null or empty strings
"""

import re
from datetime import datetime, timezone

import pandas as pd


class DateParser:
    """
    Parses export timestamps into naive datetimes.

    Aware timestamps are converted to UTC before the offset is dropped, so
    every parsed value lives on the same clock. Plain dates fall back to
    DATE_FORMATS.
    """

    DATE_FORMATS = [
        "%Y-%m-%d",      # 2024-07-25
        "%Y/%m/%d",      # 2024/07/25
        "%m/%d/%Y",      # 07/25/2024
    ]

    def __init__(self, custom_formats: list[str] | None = None):
        self.formats = (custom_formats or []) + self.DATE_FORMATS
        self._cache: dict[str, datetime | None] = {}

    def parse(self, value) -> datetime | None:
        """Parse one value; unparseable input gives None."""
        if isinstance(value, datetime):
            return self._naive(value)
        if value is None or pd.isna(value) or value == "":
            return None

        text = str(value).strip()
        if text in self._cache:
            return self._cache[text]

        result = self._parse_text(text)
        self._cache[text] = result
        return result

    def _parse_text(self, text: str) -> datetime | None:
        try:
            return self._naive(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            pass

        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    @staticmethod
    def _naive(moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(timezone.utc).replace(tzinfo=None)

    def parse_series(self, series: pd.Series) -> pd.Series:
        """Parse a whole column into datetime64 (NaT where unparseable)."""
        return pd.to_datetime(series.apply(self.parse))


class MoneyParser:
    """
    Parses monetary amounts.

    Handles "129.90", "$1,299.00", numbers and nulls. A missing amount
    parses to `default` (0 for surcharges, which are optional).
    """

    STRIP_PATTERN = re.compile(r"[^\d.\-]")

    def __init__(self, default: float | None = 0.0):
        self.default = default

    def parse(self, value) -> float | None:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return self.default
        if isinstance(value, (int, float)):
            return float(value)

        cleaned = self.STRIP_PATTERN.sub("", str(value))
        if cleaned in ("", "-", "."):
            return self.default
        try:
            return float(cleaned)
        except ValueError:
            return self.default

    def parse_series(self, series: pd.Series) -> pd.Series:
        return series.apply(self.parse).astype(float)

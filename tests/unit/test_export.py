"""
Unit Tests for the spreadsheet export.
"""

import io
from datetime import datetime, timezone

import pandas as pd

from crawler.export import EXPORT_COLUMNS, profiles_to_dataframe, write_xlsx
from crawler.models import ChannelProfile


def _profiles():
    return [
        ChannelProfile(
            url="https://www.youtube.com/user/a",
            category="tech",
            name="A",
            subscriber_count=1500,
            description="first",
            image_url="https://img.test/a.jpg",
            term="golang",
            discovered_at=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
        ),
        ChannelProfile(
            url="https://www.youtube.com/user/b",
            category="tech",
            name="B",
            subscriber_count=2500,
            term="rust",
        ),
    ]


class TestExport:

    def test_dataframe_columns(self):
        df = profiles_to_dataframe(_profiles())
        assert list(df.columns) == EXPORT_COLUMNS
        assert df.iloc[0]["Subscribers"] == 1500
        assert df.iloc[1]["Term"] == "rust"

    def test_empty_export_keeps_header(self):
        df = profiles_to_dataframe([])
        assert list(df.columns) == EXPORT_COLUMNS
        assert len(df) == 0

    def test_xlsx_round_trip(self, tmp_path):
        out = tmp_path / "channels.xlsx"

        data = write_xlsx(_profiles(), out)

        assert out.read_bytes() == data
        df = pd.read_excel(io.BytesIO(data), sheet_name="Sheet1")
        assert list(df.columns) == EXPORT_COLUMNS
        assert df["Url"].tolist() == ["https://www.youtube.com/user/a", "https://www.youtube.com/user/b"]
        assert df["Date parsed"].iloc[0] == pd.Timestamp("2024-03-01 08:30:00")

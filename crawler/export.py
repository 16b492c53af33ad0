"""
Profile export as a spreadsheet (pandas + openpyxl).
"""

import io
import logging
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from crawler.models import ChannelProfile

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Name",
    "Url",
    "Subscribers",
    "Description",
    "Image",
    "Date parsed",
    "Term",
    "Category",
]

SHEET_NAME = "Sheet1"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def profiles_to_dataframe(profiles: Iterable[ChannelProfile]) -> pd.DataFrame:
    rows = [
        {
            "Name": p.name,
            "Url": p.url,
            "Subscribers": p.subscriber_count,
            "Description": p.description,
            "Image": p.image_url,
            # Excel has no timezone-aware datetimes
            "Date parsed": p.discovered_at.replace(tzinfo=None),
            "Term": p.term,
            "Category": p.category,
        }
        for p in profiles
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def write_xlsx(profiles: Iterable[ChannelProfile], target: Union[str, Path, None] = None) -> bytes:
    """
    Write profiles to an xlsx workbook.

    Returns the workbook bytes; also writes them to `target` if a path is given.
    """
    df = profiles_to_dataframe(profiles)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    data = buffer.getvalue()

    if target is not None:
        Path(target).write_bytes(data)
        logger.info(f"Exported {len(df)} profiles to {target}")
    return data

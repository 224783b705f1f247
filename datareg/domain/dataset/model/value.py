"""Dataset domain value objects."""

from enum import StrEnum
from typing import NewType

DatasetId = NewType("DatasetId", int)
"""Sequential registry id. The first dataset is 0; ids are never reused."""


class UsageCounter(StrEnum):
    """The three usage counters a dataset carries. Values are column names."""

    VIEWS = "views"
    DOWNLOADS = "downloads"
    CITATIONS = "citations"

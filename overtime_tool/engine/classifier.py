"""Interval classification by type tag (case-sensitive).

Only the bare HOLIDAY and TIME_OFF tags are PTO. The ``*_TIME_ENTRY``
variants mark the day on the calendar but the hours themselves are work.
"""

from __future__ import annotations

from overtime_tool.models import EntryClass, TimeInterval

BREAK_TAG = "BREAK"
HOLIDAY_PTO_TAG = "HOLIDAY"
TIME_OFF_PTO_TAG = "TIME_OFF"


def classify_interval(interval: TimeInterval) -> EntryClass:
    tag = interval.type_tag
    if not isinstance(tag, str):
        return EntryClass.WORK
    if tag == BREAK_TAG:
        return EntryClass.BREAK
    if tag == HOLIDAY_PTO_TAG:
        return EntryClass.HOLIDAY_PTO
    if tag == TIME_OFF_PTO_TAG:
        return EntryClass.TIMEOFF_PTO
    return EntryClass.WORK

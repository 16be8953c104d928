"""
Parsing of a single weekday's working-hours configuration.

A day is stored either as JSON::

    {"isWorkingDay": true, "startTime": "09:00", "endTime": "17:00",
     "breaks": [{"start": "12:00", "end": "13:00"}]}

or, in older records, as a bare "HH:mm-HH:mm" range meaning one working
window without breaks. Parsing is total: malformed input never raises, it
becomes a closed day together with a ``ParseWarning`` describing what was
wrong.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from .models import (
    BreakPeriod,
    DaySchedule,
    ParseResult,
    ParseWarning,
    RawDaySchedule,
    ScheduleFormat,
    WeeklySchedule,
)
from .time_slots import is_valid_time_format, is_valid_time_slot_format, split_time_slot, to_minutes

logger = logging.getLogger(__name__)


def _unconfigured() -> ParseResult:
    return ParseResult(schedule=DaySchedule.closed(), source_format=ScheduleFormat.UNCONFIGURED)


def _invalid(message: str, **details: Any) -> ParseResult:
    return ParseResult(
        schedule=DaySchedule.closed(),
        source_format=ScheduleFormat.INVALID,
        warning=ParseWarning(message=message, details=details),
    )


def parse_day_schedule(raw: RawDaySchedule) -> ParseResult:
    """
    Parse one weekday's configuration.

    Tries the structured JSON form first, then the legacy bare range, and
    falls back to a closed day with a warning.
    """
    if raw is None:
        return _unconfigured()

    if isinstance(raw, Mapping):
        return parse_structured_mapping(raw)

    if not isinstance(raw, str):
        return _invalid("Unsupported schedule value", value=raw)

    text = raw.strip()
    if not text or text == "{}":
        return _unconfigured()

    structured = parse_structured_day(text)
    if structured is not None:
        return structured

    legacy = parse_legacy_range(text)
    if legacy is not None:
        return legacy

    return _invalid("Failed to parse schedule JSON", scheduleJson=raw)


def parse_structured_day(text: str) -> Optional[ParseResult]:
    """
    Parse the JSON form of a day.

    Returns None when ``text`` is not JSON, or is a JSON string, so the
    caller can try the legacy range instead.
    """
    try:
        parsed = json.loads(text)
    except RecursionError:
        return _invalid("Schedule JSON is nested too deeply", length=len(text))
    except ValueError as exc:
        logger.debug("Day schedule is not JSON: %s", exc)
        return None

    if isinstance(parsed, str):
        return None

    if not isinstance(parsed, dict):
        return _invalid("Schedule JSON is not an object", scheduleJson=text)

    return parse_structured_mapping(parsed)


def parse_structured_mapping(data: Mapping[str, Any]) -> ParseResult:
    """Validate an already decoded day mapping."""
    if not data:
        return _unconfigured()

    if not data.get("isWorkingDay"):
        return ParseResult(schedule=DaySchedule.closed(), source_format=ScheduleFormat.STRUCTURED)

    start_time = data.get("startTime") or None
    end_time = data.get("endTime") or None

    if start_time is not None and not is_valid_time_format(start_time):
        return _invalid("Invalid start time format in schedule", startTime=start_time)

    if end_time is not None and not is_valid_time_format(end_time):
        return _invalid("Invalid end time format in schedule", endTime=end_time)

    if start_time is None or end_time is None:
        return _invalid("Missing start or end time for working day", startTime=start_time, endTime=end_time)

    if to_minutes(start_time) >= to_minutes(end_time):
        return _invalid("Start time must be before end time", startTime=start_time, endTime=end_time)

    raw_breaks = data.get("breaks")
    if raw_breaks is None:
        raw_breaks = []
    if not isinstance(raw_breaks, list):
        return _invalid("Breaks must be a list", breaks=raw_breaks)

    breaks: List[BreakPeriod] = []
    for raw_break in raw_breaks:
        if not isinstance(raw_break, Mapping):
            return _invalid("Invalid break time format", breakTime=raw_break)

        break_start = raw_break.get("start")
        break_end = raw_break.get("end")

        if not is_valid_time_format(break_start) or not is_valid_time_format(break_end):
            return _invalid("Invalid break time format", breakTime=dict(raw_break))

        if to_minutes(break_start) >= to_minutes(break_end):
            return _invalid("Break start time must be before end time", breakTime=dict(raw_break))

        breaks.append(BreakPeriod(start=break_start, end=break_end))

    schedule = DaySchedule(
        is_working_day=True,
        start_time=start_time,
        end_time=end_time,
        breaks=tuple(breaks),
    )
    return ParseResult(schedule=schedule, source_format=ScheduleFormat.STRUCTURED)


def parse_legacy_range(text: str) -> Optional[ParseResult]:
    """
    Parse a legacy "HH:mm-HH:mm" day, plain or JSON-quoted.

    Returns None when ``text`` does not look like a range at all.
    """
    candidate = text.strip()
    if len(candidate) >= 2 and candidate[0] == candidate[-1] == '"':
        try:
            candidate = json.loads(candidate)
        except ValueError:
            return None
        candidate = candidate.strip()

    if not is_valid_time_slot_format(candidate):
        return None

    start_time, end_time = split_time_slot(candidate)
    if to_minutes(start_time) >= to_minutes(end_time):
        return _invalid("Start time must be before end time", startTime=start_time, endTime=end_time)

    schedule = DaySchedule(is_working_day=True, start_time=start_time, end_time=end_time)
    return ParseResult(schedule=schedule, source_format=ScheduleFormat.LEGACY_RANGE)


def get_day_schedule(raw: RawDaySchedule) -> DaySchedule:
    """
    Parse a day and log any warning.

    Always returns a usable schedule; malformed input yields a closed day.
    """
    result = parse_day_schedule(raw)
    if result.warning is not None:
        logger.warning("Treating day as not working: %s", result.warning)
    return result.schedule


def schedule_for_weekday(weekly: WeeklySchedule, weekday: int) -> DaySchedule:
    """Parse the configuration of a 0=Sunday weekday, logging malformed input."""
    return get_day_schedule(weekly.raw_for(weekday))


def schedule_for_date(weekly: WeeklySchedule, on_date: date) -> DaySchedule:
    return get_day_schedule(weekly.raw_for_date(on_date))


def serialize_day_schedule(schedule: DaySchedule) -> str:
    """Serialize a day to its stored JSON form."""
    payload: Dict[str, Any] = schedule.to_dict()
    return json.dumps(payload)

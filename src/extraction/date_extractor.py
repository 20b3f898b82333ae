"""
Due-date extraction from a transcript.

The cascade is an ordered tuple of DateRule entries; the first rule that
resolves a date wins. Every rule is evaluated against an explicit
``reference_now`` so nothing here reads the clock.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Callable, Optional, Tuple

Resolver = Callable[["re.Match[str]", datetime], Optional[datetime]]

WEEKDAYS = MappingProxyType(
    {
        "monday": 0,
        "tuesday": 1,
        "wednesday": 2,
        "thursday": 3,
        "friday": 4,
        "saturday": 5,
        "sunday": 6,
    }
)

MONTHS = MappingProxyType(
    {
        "january": 1, "jan": 1,
        "february": 2, "feb": 2,
        "march": 3, "mar": 3,
        "april": 4, "apr": 4,
        "may": 5,
        "june": 6, "jun": 6,
        "july": 7, "jul": 7,
        "august": 8, "aug": 8,
        "september": 9, "sept": 9, "sep": 9,
        "october": 10, "oct": 10,
        "november": 11, "nov": 11,
        "december": 12, "dec": 12,
    }
)

# Longest names first so "sept" is not cut to "sep".
_MONTH_ALT = "|".join(sorted(MONTHS, key=len, reverse=True))
_WEEKDAY_ALT = "|".join(WEEKDAYS)
_ORDINAL = r"(?P<ordinal>st|nd|rd|th)?"

# "may" is only a month with a year, an ordinal or a date preposition in front.
_MAY_DATE_CONTEXT = re.compile(r"\b(?:on|by|before|until|due|from|of)\s+(?:the\s+)?$", re.IGNORECASE)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _days_from_today(now: datetime, days: int) -> Optional[datetime]:
    try:
        return start_of_day(now) + timedelta(days=days)
    except OverflowError:
        return None


def _resolve_today(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    return start_of_day(now)


def _resolve_tomorrow(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    return _days_from_today(now, 1)


def _resolve_weekday(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    target = WEEKDAYS[match.group("weekday").lower()]
    days_ahead = target - now.weekday()
    # Always the next occurrence, never today, with or without "next".
    if days_ahead <= 0:
        days_ahead += 7
    return _days_from_today(now, days_ahead)


def _resolve_in_days(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    return _days_from_today(now, int(match.group("count")))


def _resolve_in_weeks(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    return _days_from_today(now, 7 * int(match.group("count")))


def _calendar_date(now: datetime, year: Optional[str], month: int, day: str) -> Optional[datetime]:
    """Build start-of-day for an absolute date; only dates strictly after ``now`` count."""
    y = int(year) if year else now.year
    if y < 100:
        y += 2000
    try:
        candidate = now.replace(
            year=y, month=month, day=int(day), hour=0, minute=0, second=0, microsecond=0
        )
    except ValueError:
        return None
    return candidate if candidate > now else None


def _is_modal_may(match: "re.Match[str]") -> bool:
    if match.group("month").lower() != "may" or match.group("year") or match.group("ordinal"):
        return False
    return _MAY_DATE_CONTEXT.search(match.string[: match.start()]) is None


def _resolve_month_name(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    if _is_modal_may(match):
        return None
    month = MONTHS[match.group("month").lower()]
    return _calendar_date(now, match.group("year"), month, match.group("day"))


def _resolve_numeric(match: "re.Match[str]", now: datetime) -> Optional[datetime]:
    month = int(match.group("month"))
    if not 1 <= month <= 12:
        return None
    return _calendar_date(now, match.group("year"), month, match.group("day"))


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: "re.Pattern[str]"
    resolve: Resolver

    def apply(self, transcript: str, reference_now: datetime) -> Optional[datetime]:
        # A rule may match several spans; the first one that resolves wins.
        for match in self.pattern.finditer(transcript):
            resolved = self.resolve(match, reference_now)
            if resolved is not None:
                return resolved
        return None


DATE_RULES: Tuple[DateRule, ...] = (
    DateRule("today", re.compile(r"\btoday\b", re.IGNORECASE), _resolve_today),
    DateRule("tomorrow", re.compile(r"\btomorrow\b", re.IGNORECASE), _resolve_tomorrow),
    DateRule(
        "weekday",
        re.compile(rf"\b(?:next\s+)?(?P<weekday>{_WEEKDAY_ALT})\b", re.IGNORECASE),
        _resolve_weekday,
    ),
    DateRule(
        "in_days",
        re.compile(r"\bin\s+(?P<count>\d{1,4})\s+days?\b", re.IGNORECASE),
        _resolve_in_days,
    ),
    DateRule(
        "in_weeks",
        re.compile(r"\bin\s+(?P<count>\d{1,3})\s+weeks?\b", re.IGNORECASE),
        _resolve_in_weeks,
    ),
    DateRule(
        "month_day",
        re.compile(
            rf"\b(?P<month>{_MONTH_ALT})\.?\s+(?P<day>\d{{1,2}}){_ORDINAL}\b(?:,?\s+(?P<year>\d{{4}})\b)?",
            re.IGNORECASE,
        ),
        _resolve_month_name,
    ),
    DateRule(
        "day_month",
        re.compile(
            rf"\b(?P<day>\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?(?P<month>{_MONTH_ALT})\b\.?(?:,?\s+(?P<year>\d{{4}})\b)?",
            re.IGNORECASE,
        ),
        _resolve_month_name,
    ),
    DateRule(
        "numeric",
        re.compile(r"\b(?P<day>\d{1,2})[-/](?P<month>\d{1,2})[-/](?P<year>\d{4}|\d{2})\b"),
        _resolve_numeric,
    ),
)


class DateExtractor:
    def __init__(self, rules: Tuple[DateRule, ...] = DATE_RULES):
        self.rules = rules

    def match(self, transcript: str, reference_now: datetime) -> Tuple[Optional[str], Optional[datetime]]:
        """Return (rule name, due date) for the first rule that resolves, or (None, None)."""
        for rule in self.rules:
            resolved = rule.apply(transcript, reference_now)
            if resolved is not None:
                return rule.name, resolved
        return None, None

    def extract_due_date(self, transcript: str, reference_now: datetime) -> Optional[datetime]:
        return self.match(transcript, reference_now)[1]


def extract_due_date(transcript: str, reference_now: datetime) -> Optional[datetime]:
    return DateExtractor().extract_due_date(transcript, reference_now)

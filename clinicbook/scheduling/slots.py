"""
Slot Generation

Turns a doctor's recurring weekly rules, absolute unavailability exceptions and
already-taken start instants into concrete bookable slots.

Everything here is pure and synchronous: callers load the state (see
services/availability.py) and hand it in. Rules and exceptions only need the
attributes of the ORM rows (weekday, start_time, end_time, slot_minutes /
starts_at, ends_at), so plain objects work in tests.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple

from clinicbook.scheduling.intervals import anchor, contains, overlaps, weekday_of
from clinicbook.utils.timeutils import format_instant


@dataclass(frozen=True, order=True)
class Slot:
    starts_at: datetime
    ends_at: datetime

    def to_dict(self):
        return {"starts_at": format_instant(self.starts_at), "ends_at": format_instant(self.ends_at)}


def _rule_windows(rule, day) -> Iterator[Tuple[datetime, datetime]]:
    """Full slots of one rule on one calendar day; a trailing partial slot is dropped."""
    if rule.slot_minutes <= 0:
        return
    window_start = anchor(day, rule.start_time)
    window_end = anchor(day, rule.end_time)
    step = timedelta(minutes=rule.slot_minutes)

    current = window_start
    while window_end - current >= step:
        yield current, current + step
        current += step


def first_overlapping_exception(exceptions: Iterable, starts_at: datetime, ends_at: datetime):
    for exc in exceptions:
        if overlaps(starts_at, ends_at, exc.starts_at, exc.ends_at):
            return exc
    return None


def iter_slots(
    rules: Iterable,
    exceptions: Iterable,
    taken: Iterable[datetime],
    from_instant: datetime,
    to_instant: datetime,
) -> Iterator[Slot]:
    """
    Lazily yield free slots with from_instant <= starts_at < to_instant, ascending.

    Algorithm:
        1. Group rules by weekday (0=Sunday)
        2. For each UTC calendar day touched by [from_instant, to_instant):
            a. collect every full slot of every rule for that weekday
            b. sort by start, keep one slot per start instant
            c. drop slots outside the range, taken starts, and slots overlapping an exception
    """
    if from_instant >= to_instant:
        return

    by_weekday = defaultdict(list)
    for rule in rules:
        by_weekday[rule.weekday].append(rule)
    if not by_weekday:
        return

    exceptions = list(exceptions)
    taken = set(taken)

    day = from_instant.date()
    last_day = (to_instant - timedelta(microseconds=1)).date()

    while day <= last_day:
        candidates = []
        for rule in by_weekday.get(weekday_of(day), ()):
            candidates.extend(_rule_windows(rule, day))

        # Slot identity is the start instant, whichever rule produced it
        seen = set()
        for starts_at, ends_at in sorted(candidates):
            if starts_at in seen:
                continue
            seen.add(starts_at)

            if starts_at < from_instant or starts_at >= to_instant:
                continue
            if starts_at in taken:
                continue
            if first_overlapping_exception(exceptions, starts_at, ends_at) is not None:
                continue

            yield Slot(starts_at, ends_at)

        if day == last_day:
            break
        day += timedelta(days=1)


def find_containing_rules(rules: Iterable, starts_at: datetime) -> List[Tuple[object, datetime]]:
    """
    Every rule whose window on starts_at's date contains [starts_at, starts_at + slot_minutes),
    as (rule, ends_at) pairs in the order iter_slots would prefer them: rules whose
    grid hits starts_at first, then earliest ends_at.
    """
    day = starts_at.date()
    weekday = weekday_of(day)

    matches = []
    for position, rule in enumerate(rules):
        if rule.weekday != weekday or rule.slot_minutes <= 0:
            continue
        window_start = anchor(day, rule.start_time)
        window_end = anchor(day, rule.end_time)
        step = timedelta(minutes=rule.slot_minutes)
        if starts_at < window_start or window_end - starts_at < step:
            continue
        on_grid = (starts_at - window_start) % step == timedelta(0)
        matches.append((not on_grid, starts_at + step, position, rule))

    matches.sort(key=lambda m: m[:3])
    return [(rule, ends_at) for _, ends_at, _, rule in matches]


def find_containing_rule(rules: Iterable, starts_at: datetime) -> Optional[Tuple[object, datetime]]:
    """Preferred (rule, ends_at) for starts_at, or None."""
    matches = find_containing_rules(rules, starts_at)
    return matches[0] if matches else None

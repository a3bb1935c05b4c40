"""
Tests for scheduling/slots.py (pure generator, no database).
"""
from datetime import datetime, time, timedelta
from types import SimpleNamespace

from clinicbook.scheduling.intervals import contains, overlaps, weekday_of
from clinicbook.scheduling.slots import Slot, find_containing_rule, find_containing_rules, iter_slots

MONDAY = datetime(2026, 1, 19)
TUESDAY = MONDAY + timedelta(days=1)


def rule(weekday=1, start=time(9, 0), end=time(10, 0), slot_minutes=30):
    return SimpleNamespace(weekday=weekday, start_time=start, end_time=end, slot_minutes=slot_minutes)


def exception(starts_at, ends_at):
    return SimpleNamespace(starts_at=starts_at, ends_at=ends_at)


def at(hour, minute=0, day=MONDAY):
    return day.replace(hour=hour, minute=minute)


def slots(rules, exceptions=(), taken=(), start=MONDAY, end=TUESDAY):
    return list(iter_slots(rules, exceptions, taken, start, end))


def test_single_rule_yields_two_slots():
    assert slots([rule()]) == [
        Slot(at(9), at(9, 30)),
        Slot(at(9, 30), at(10)),
    ]


def test_exception_removes_every_overlapping_slot():
    assert slots([rule()], exceptions=[exception(at(9, 15), at(9, 45))]) == []


def test_exception_touching_slot_edge_does_not_remove_it():
    result = slots([rule()], exceptions=[exception(at(8), at(9))])
    assert [s.starts_at for s in result] == [at(9), at(9, 30)]


def test_taken_start_is_skipped():
    assert slots([rule()], taken={at(9)}) == [Slot(at(9, 30), at(10))]


def test_empty_and_inverted_ranges():
    assert slots([rule()], start=MONDAY, end=MONDAY) == []
    assert slots([rule()], start=TUESDAY, end=MONDAY) == []


def test_no_rules_yields_nothing():
    assert slots([]) == []


def test_other_weekday_yields_nothing():
    assert slots([rule(weekday=3)]) == []


def test_exact_division_emits_no_partial_slot():
    result = slots([rule(start=time(9), end=time(11), slot_minutes=40)])
    assert [(s.starts_at, s.ends_at) for s in result] == [
        (at(9), at(9, 40)),
        (at(9, 40), at(10, 20)),
        (at(10, 20), at(11)),
    ]

    result = slots([rule(start=time(9), end=time(11), slot_minutes=30)])
    assert len(result) == 4
    assert result[-1].ends_at == at(11)


def test_trailing_remainder_is_dropped():
    result = slots([rule(start=time(9), end=time(10, 10), slot_minutes=30)])
    assert [s.starts_at for s in result] == [at(9), at(9, 30)]
    assert all(s.ends_at <= at(10, 10) for s in result)


def test_slot_longer_than_window_yields_nothing():
    assert slots([rule(start=time(9), end=time(9, 20), slot_minutes=30)]) == []


def test_multiple_weeks_repeat_the_rule():
    result = slots([rule()], start=MONDAY, end=MONDAY + timedelta(days=14))
    assert [s.starts_at for s in result] == [
        at(9), at(9, 30),
        at(9, day=MONDAY + timedelta(days=7)), at(9, 30, day=MONDAY + timedelta(days=7)),
    ]


def test_output_is_ascending_across_unordered_rules():
    rules = [rule(start=time(14), end=time(15)), rule(start=time(9), end=time(10))]
    result = slots(rules)
    starts = [s.starts_at for s in result]
    assert starts == sorted(starts)
    assert starts == [at(9), at(9, 30), at(14), at(14, 30)]


def test_overlapping_rules_do_not_duplicate_starts():
    rules = [rule(start=time(9), end=time(10)), rule(start=time(9), end=time(11))]
    result = slots(rules)
    starts = [s.starts_at for s in result]
    assert len(starts) == len(set(starts))
    assert starts == [at(9), at(9, 30), at(10), at(10, 30)]


def test_range_bounds_clip_slots_by_start():
    # from 09:15 excludes the 09:00 slot; to 09:30 excludes the 09:30 slot
    assert slots([rule()], start=at(9, 15), end=at(10)) == [Slot(at(9, 30), at(10))]
    assert slots([rule()], start=MONDAY, end=at(9, 30)) == [Slot(at(9), at(9, 30))]


def test_range_ending_mid_day_still_covers_that_day():
    # Sunday 12:00 -> Monday 09:45 reaches into Monday morning
    result = slots([rule()], start=at(12, day=MONDAY - timedelta(days=1)), end=at(9, 45))
    assert [s.starts_at for s in result] == [at(9), at(9, 30)]


def test_generator_is_lazy():
    gen = iter_slots([rule()], [], set(), MONDAY, MONDAY + timedelta(days=3650))
    assert next(gen) == Slot(at(9), at(9, 30))


def test_listing_is_idempotent():
    rules = [rule(), rule(weekday=2, start=time(13), end=time(17), slot_minutes=45)]
    excs = [exception(at(13, 30, day=TUESDAY), at(14, day=TUESDAY))]
    first = slots(rules, excs, {at(9, 30)}, MONDAY, MONDAY + timedelta(days=7))
    second = slots(rules, excs, {at(9, 30)}, MONDAY, MONDAY + timedelta(days=7))
    assert first == second


def test_properties_hold_over_a_mixed_week():
    rules = [
        rule(weekday=1, start=time(8), end=time(12), slot_minutes=20),
        rule(weekday=1, start=time(11), end=time(13), slot_minutes=30),
        rule(weekday=3, start=time(9), end=time(17, 5), slot_minutes=45),
        rule(weekday=5, start=time(0), end=time(23, 59), slot_minutes=90),
    ]
    wednesday = MONDAY + timedelta(days=2)
    excs = [
        exception(at(9, 10), at(9, 50)),
        exception(at(12, day=wednesday), at(13, 30, day=wednesday)),
        exception(MONDAY + timedelta(days=4, hours=6), MONDAY + timedelta(days=4, hours=7)),
    ]
    taken = {at(8), at(11, 30), at(9, day=wednesday)}
    start, end = MONDAY, MONDAY + timedelta(days=7)

    result = slots(rules, excs, taken, start, end)
    assert result

    for s in result:
        assert start <= s.starts_at < end
        assert not any(overlaps(s.starts_at, s.ends_at, e.starts_at, e.ends_at) for e in excs)
        assert s.starts_at not in taken
        day = s.starts_at.date()
        assert any(
            r.weekday == weekday_of(day)
            and contains(
                datetime.combine(day, r.start_time), datetime.combine(day, r.end_time),
                s.starts_at, s.ends_at,
            )
            for r in rules
        )

    starts = [s.starts_at for s in result]
    assert starts == sorted(starts)
    assert len(starts) == len(set(starts))


def test_find_containing_rule_uses_rule_slot_length():
    rules = [rule(start=time(9), end=time(10), slot_minutes=20)]
    match = find_containing_rule(rules, at(9, 40))
    assert match is not None
    assert match[1] == at(10)


def test_find_containing_rule_rejects_outside_window():
    assert find_containing_rule([rule()], at(10)) is None
    assert find_containing_rule([rule()], at(9, 45)) is None  # 09:45-10:15 spills over
    assert find_containing_rule([rule(weekday=2)], at(9)) is None


def test_find_containing_rule_prefers_earliest_end():
    short = rule(start=time(9), end=time(10), slot_minutes=15)
    long_ = rule(start=time(9), end=time(12), slot_minutes=60)
    for ordering in ([short, long_], [long_, short]):
        matched, ends_at = find_containing_rule(ordering, at(9))
        assert matched is short
        assert ends_at == at(9, 15)


def test_find_containing_rule_prefers_rule_on_its_own_grid():
    # 09:00 is on long_'s grid but falls between off_grid's 08:50 and 09:10 slots
    off_grid = rule(start=time(8, 50), end=time(10), slot_minutes=20)
    long_ = rule(start=time(9), end=time(11), slot_minutes=60)
    matches = find_containing_rules([off_grid, long_], at(9))
    assert [(m, e) for m, e in matches] == [(long_, at(10)), (off_grid, at(9, 20))]


def test_booking_lookup_agrees_with_listed_slots():
    rules = [
        rule(start=time(9), end=time(12), slot_minutes=60),
        rule(start=time(9), end=time(10), slot_minutes=15),
        rule(start=time(9, 30), end=time(11), slot_minutes=45),
    ]
    for s in slots(rules):
        matched, ends_at = find_containing_rule(rules, s.starts_at)
        assert ends_at == s.ends_at


def test_last_representable_day_does_not_overflow():
    last = datetime(9999, 12, 31)
    late = rule(weekday=weekday_of(last.date()), start=time(23), end=time(23, 59), slot_minutes=30)
    result = slots([late], start=last, end=datetime.max)
    assert result == [Slot(last.replace(hour=23), last.replace(hour=23, minute=30))]
    assert find_containing_rule([late], last.replace(hour=23, minute=30)) is None

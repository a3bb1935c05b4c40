from .intervals import overlaps, contains, weekday_of, anchor
from .slots import Slot, iter_slots, find_containing_rule, find_containing_rules, first_overlapping_exception

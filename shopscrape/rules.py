"""
Ordered (predicate, extractor) cascades.

Container tiers and per-field lookups are both expressed as a list of rules
evaluated top to bottom; the first rule whose predicate holds and whose
extractor returns something non-empty wins.
"""
from typing import Any, Callable, Iterable, NamedTuple, Optional


def _always(_target: Any) -> bool:
    return True


class Rule(NamedTuple):
    label: str
    extract: Callable[[Any], Any]
    predicate: Callable[[Any], bool] = _always


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def first_match(rules: Iterable[Rule], target: Any) -> Optional[Any]:
    hit = first_rule(rules, target)
    return hit[1] if hit else None


def first_rule(rules: Iterable[Rule], target: Any):
    """Like first_match but returns ``(label, value)`` so callers can log the tier."""
    for rule in rules:
        if not rule.predicate(target):
            continue
        value = rule.extract(target)
        if not is_empty(value):
            return rule.label, value
    return None

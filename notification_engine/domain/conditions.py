"""Condition language used to narrow when a notification rule fires.

Rules store their conditions as JSON. The JSON is parsed into a small tagged
tree and evaluated against an event:

* ``{"field": "payload.step_label"}`` holds when the field is present and truthy;
* ``{"field": "amount", "op": "gt", "value": 100}`` compares a field with a literal;
* ``{"and": [...]}``, ``{"or": [...]}`` and ``{"not": {...}}`` compose nodes.

The mapping form written by the first version of the rule editor,
``{"payload": {"document_type": "KBIS"}, "entity_type": "document"}``, is read
as a conjunction of equalities.

Field paths are dotted. A leading ``payload.`` is optional; ``event.<name>``
addresses an attribute of the event itself. Evaluation never raises: missing
fields and values of incomparable types simply do not match.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Union

from .entities import Event
from .errors import ConditionError

logger = logging.getLogger(__name__)

EVENT_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    {"entity_type", "entity_id", "event_type", "actor_type", "actor_id"}
)

_OPERATOR_ALIASES: Final[dict[str, str]] = {
    "eq": "eq",
    "equals": "eq",
    "==": "eq",
    "ne": "ne",
    "not_equals": "ne",
    "!=": "ne",
    "gt": "gt",
    "greater_than": "gt",
    ">": "gt",
    "gte": "gte",
    ">=": "gte",
    "lt": "lt",
    "less_than": "lt",
    "<": "lt",
    "lte": "lte",
    "<=": "lte",
    "in": "in",
    "not_in": "not_in",
    "exists": "exists",
}
OPERATORS: Final[frozenset[str]] = frozenset(_OPERATOR_ALIASES.values())

_COMPOSITE_KEYS: Final[frozenset[str]] = frozenset({"and", "or", "not"})


class _Missing:
    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return "<missing>"


MISSING: Final = _Missing()


@dataclass(frozen=True)
class FieldPath:
    path: str


@dataclass(frozen=True)
class Comparison:
    op: str
    field: str
    value: Any = None


@dataclass(frozen=True)
class AllOf:
    items: tuple["Condition", ...]


@dataclass(frozen=True)
class AnyOf:
    items: tuple["Condition", ...]


@dataclass(frozen=True)
class Not:
    item: "Condition"


Condition = Union[FieldPath, Comparison, AllOf, AnyOf, Not]


def parse_conditions(raw: Any) -> Condition | None:
    """Parse the stored JSON representation into a condition tree.

    ``None`` and empty mappings mean "no conditions" and return ``None``.
    Raises :class:`ConditionError` when the expression is malformed.
    """

    if raw is None:
        return None
    if isinstance(raw, Mapping) and not raw:
        return None
    return _parse_node(raw, "conditions")


def _parse_node(raw: Any, location: str) -> Condition:
    if not isinstance(raw, Mapping):
        raise ConditionError(
            f"Condition at '{location}' must be an object", location=location
        )

    composite_keys = _COMPOSITE_KEYS.intersection(raw)
    if composite_keys:
        if len(raw) != 1:
            raise ConditionError(
                f"Condition at '{location}' mixes '{sorted(composite_keys)[0]}' with other keys",
                location=location,
            )
        key = next(iter(composite_keys))
        value = raw[key]
        if key == "not":
            return Not(_parse_node(value, f"{location}.not"))
        if not _is_sequence(value) or not value:
            raise ConditionError(
                f"'{key}' at '{location}' must be a non-empty list", location=location
            )
        items = tuple(
            _parse_node(entry, f"{location}.{key}[{index}]")
            for index, entry in enumerate(value)
        )
        return AllOf(items) if key == "and" else AnyOf(items)

    if "field" in raw:
        return _parse_leaf(raw, location)

    if "op" in raw or "value" in raw:
        raise ConditionError(
            f"Condition at '{location}' has an operator but no 'field'", location=location
        )

    return _parse_legacy_mapping(raw, location)


def _parse_leaf(raw: Mapping[str, Any], location: str) -> Condition:
    field_path = raw.get("field")
    if not isinstance(field_path, str) or not field_path.strip():
        raise ConditionError(
            f"'field' at '{location}' must be a non-empty string", location=location
        )
    field_path = field_path.strip()

    unexpected = set(raw) - {"field", "op", "value"}
    if unexpected:
        raise ConditionError(
            f"Unexpected keys at '{location}': {', '.join(sorted(unexpected))}",
            location=location,
        )

    if "op" not in raw:
        return FieldPath(field_path)

    raw_op = raw.get("op")
    op = _OPERATOR_ALIASES.get(str(raw_op).strip().lower()) if raw_op is not None else None
    if op is None:
        raise ConditionError(
            f"Unknown operator '{raw_op}' at '{location}'",
            location=location,
            valid_operators=sorted(OPERATORS),
        )

    if op == "exists":
        expected = raw.get("value", True)
        if not isinstance(expected, bool):
            raise ConditionError(
                f"'exists' at '{location}' expects a boolean value", location=location
            )
        return Comparison(op, field_path, expected)

    if "value" not in raw:
        raise ConditionError(
            f"Operator '{op}' at '{location}' requires a 'value'", location=location
        )
    value = raw["value"]
    if op in {"in", "not_in"}:
        if not _is_sequence(value):
            raise ConditionError(
                f"Operator '{op}' at '{location}' expects a list value", location=location
            )
        value = tuple(value)
    return Comparison(op, field_path, value)


def _parse_legacy_mapping(raw: Mapping[str, Any], location: str) -> Condition:
    items: list[Condition] = []
    for key, expected in raw.items():
        if key == "payload":
            if not isinstance(expected, Mapping):
                raise ConditionError(
                    f"'payload' at '{location}' must be an object", location=location
                )
            for payload_key, payload_value in expected.items():
                items.append(Comparison("eq", f"payload.{payload_key}", payload_value))
        elif key in EVENT_ATTRIBUTES:
            items.append(Comparison("eq", f"event.{key}", expected))
        else:
            raise ConditionError(
                f"Unknown event attribute '{key}' at '{location}'",
                location=location,
                valid_attributes=sorted(EVENT_ATTRIBUTES | {"payload"}),
            )
    if not items:
        raise ConditionError(f"Condition at '{location}' is empty", location=location)
    if len(items) == 1:
        return items[0]
    return AllOf(tuple(items))


def resolve_field(event: Event, path: str) -> Any:
    """Return the value addressed by ``path`` or :data:`MISSING`."""

    segments = [segment for segment in path.split(".") if segment]
    if not segments:
        return MISSING

    if segments[0] == "event":
        if len(segments) < 2 or segments[1] not in EVENT_ATTRIBUTES:
            return MISSING
        current: Any = getattr(event, segments[1], None)
        if current is None:
            return MISSING
        segments = segments[2:]
    else:
        if segments[0] == "payload":
            segments = segments[1:]
        current = event.payload or {}

    for segment in segments:
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif _is_sequence(current) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def evaluate(condition: Condition | None, event: Event) -> bool:
    """Evaluate ``condition`` against ``event``. ``None`` always matches."""

    if condition is None:
        return True
    if isinstance(condition, AllOf):
        return all(evaluate(item, event) for item in condition.items)
    if isinstance(condition, AnyOf):
        return any(evaluate(item, event) for item in condition.items)
    if isinstance(condition, Not):
        return not evaluate(condition.item, event)
    if isinstance(condition, FieldPath):
        value = resolve_field(event, condition.path)
        return value is not MISSING and bool(value)
    if isinstance(condition, Comparison):
        return _compare(condition, resolve_field(event, condition.field))
    return False


def _compare(condition: Comparison, actual: Any) -> bool:
    op = condition.op
    expected = condition.value

    if op == "exists":
        present = actual is not MISSING and actual is not None
        return present is bool(expected)

    if actual is MISSING:
        return False

    if op == "eq":
        return actual == expected
    if op == "ne":
        return actual != expected
    if op == "in":
        return _contains(expected, actual)
    if op == "not_in":
        return not _contains(expected, actual)

    if actual is None or expected is None:
        return False
    try:
        if op == "gt":
            return actual > expected
        if op == "gte":
            return actual >= expected
        if op == "lt":
            return actual < expected
        if op == "lte":
            return actual <= expected
    except TypeError:
        return False
    return False


def _contains(candidates: Any, value: Any) -> bool:
    if not _is_sequence(candidates):
        return False
    return any(value == candidate for candidate in candidates)


def matches_conditions(raw: Any, event: Event, *, rule_id: str | None = None) -> bool:
    """Parse and evaluate ``raw`` against ``event`` without ever raising.

    Malformed expressions are logged and treated as non-matching.
    """

    try:
        condition = parse_conditions(raw)
    except ConditionError as exc:
        logger.warning(
            "Rule %s has malformed conditions, treating as non-matching: %s",
            rule_id,
            exc.message,
        )
        return False
    return evaluate(condition, event)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


__all__ = [
    "AllOf",
    "AnyOf",
    "Comparison",
    "Condition",
    "EVENT_ATTRIBUTES",
    "FieldPath",
    "MISSING",
    "Not",
    "OPERATORS",
    "evaluate",
    "matches_conditions",
    "parse_conditions",
    "resolve_field",
]

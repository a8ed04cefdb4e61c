"""Tests for the rule condition language."""

from __future__ import annotations

import logging

import pytest

from notification_engine.domain.conditions import (
    AllOf,
    AnyOf,
    Comparison,
    FieldPath,
    Not,
    evaluate,
    matches_conditions,
    parse_conditions,
)
from notification_engine.domain.entities import Event
from notification_engine.domain.errors import ConditionError, ValidationError


def _event(payload=None, **overrides) -> Event:
    values = {
        "id": "evt-1",
        "entity_type": "dossier",
        "entity_id": "dos-1",
        "event_type": "STEP_COMPLETED",
        "actor_type": "ADMIN",
        "actor_id": "admin-1",
        "payload": payload if payload is not None else {},
    }
    values.update(overrides)
    return Event(**values)


def test_empty_conditions_always_match() -> None:
    assert parse_conditions(None) is None
    assert parse_conditions({}) is None
    assert matches_conditions(None, _event()) is True
    assert matches_conditions({}, _event()) is True


def test_parse_builds_tagged_tree() -> None:
    tree = parse_conditions(
        {
            "and": [
                {"field": "step_label"},
                {"or": [{"field": "amount", "op": ">", "value": 10}, {"not": {"field": "x"}}]},
            ]
        }
    )

    assert tree == AllOf(
        (
            FieldPath("step_label"),
            AnyOf((Comparison("gt", "amount", 10), Not(FieldPath("x")))),
        )
    )


@pytest.mark.parametrize(
    ("condition", "payload", "expected"),
    [
        ({"field": "step_label", "op": "eq", "value": "Identification"}, {"step_label": "Identification"}, True),
        ({"field": "payload.step_label", "op": "eq", "value": "Payment"}, {"step_label": "Identification"}, False),
        ({"field": "amount", "op": "gt", "value": 100}, {"amount": 150}, True),
        ({"field": "amount", "op": "lte", "value": 100}, {"amount": 150}, False),
        ({"field": "amount", "op": "gte", "value": 150}, {"amount": 150}, True),
        ({"field": "amount", "op": "lt", "value": 10}, {"amount": 5}, True),
        ({"field": "status", "op": "ne", "value": "DRAFT"}, {"status": "SENT"}, True),
        ({"field": "type", "op": "in", "value": ["KBIS", "ID"]}, {"type": "ID"}, True),
        ({"field": "type", "op": "not_in", "value": ["KBIS", "ID"]}, {"type": "RIB"}, True),
        ({"field": "document.type", "op": "eq", "value": "KBIS"}, {"document": {"type": "KBIS"}}, True),
        ({"field": "items.1", "op": "eq", "value": "b"}, {"items": ["a", "b"]}, True),
        ({"field": "step_label"}, {"step_label": ""}, False),
        ({"field": "step_label"}, {"step_label": "Identification"}, True),
    ],
)
def test_comparisons(condition, payload, expected) -> None:
    assert matches_conditions(condition, _event(payload)) is expected


@pytest.mark.parametrize(
    "condition",
    [
        {"field": "missing", "op": "eq", "value": 1},
        {"field": "missing", "op": "ne", "value": 1},
        {"field": "missing", "op": "gt", "value": 1},
        {"field": "missing", "op": "not_in", "value": [1]},
        {"field": "missing"},
        {"field": "payload.deep.missing.path", "op": "eq", "value": "x"},
        {"field": "items.5", "op": "eq", "value": "x"},
    ],
)
def test_absent_fields_never_match(condition) -> None:
    event = _event({"items": ["a"]})

    assert matches_conditions(condition, event) is False


def test_incomparable_types_do_not_match() -> None:
    event = _event({"amount": "a lot"})

    assert matches_conditions({"field": "amount", "op": "gt", "value": 10}, event) is False


def test_exists_operator_checks_presence() -> None:
    event = _event({"order_id": "ord-1", "empty": None})

    assert matches_conditions({"field": "order_id", "op": "exists"}, event) is True
    assert matches_conditions({"field": "empty", "op": "exists"}, event) is False
    assert matches_conditions({"field": "other", "op": "exists", "value": False}, event) is True


def test_event_attributes_are_addressable() -> None:
    event = _event()

    assert matches_conditions({"field": "event.actor_type", "op": "eq", "value": "ADMIN"}, event)
    assert not matches_conditions({"field": "event.unknown", "op": "exists"}, event)


def test_legacy_mapping_is_a_conjunction_of_equalities() -> None:
    condition = {"payload": {"document_type": "KBIS"}, "entity_type": "document"}

    assert matches_conditions(
        condition, _event({"document_type": "KBIS"}, entity_type="document")
    )
    assert not matches_conditions(
        condition, _event({"document_type": "KBIS"}, entity_type="dossier")
    )


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ([1, 2], "must be an object"),
        ({"and": []}, "non-empty list"),
        ({"and": [{"field": "a"}], "field": "b"}, "mixes"),
        ({"field": "a", "op": "matches", "value": "x"}, "Unknown operator"),
        ({"field": "a", "op": "eq"}, "requires a 'value'"),
        ({"field": "a", "op": "in", "value": "abc"}, "expects a list"),
        ({"field": "a", "op": "exists", "value": "yes"}, "expects a boolean"),
        ({"op": "eq", "value": 1}, "no 'field'"),
        ({"unknown_attribute": 1}, "Unknown event attribute"),
        ({"field": "", "op": "eq", "value": 1}, "non-empty string"),
    ],
)
def test_malformed_conditions_raise(raw, message) -> None:
    with pytest.raises(ConditionError) as exc_info:
        parse_conditions(raw)

    assert message in exc_info.value.message
    assert isinstance(exc_info.value, ValidationError)


def test_unknown_operator_lists_valid_ones() -> None:
    with pytest.raises(ConditionError) as exc_info:
        parse_conditions({"field": "a", "op": "like", "value": "x"})

    assert "eq" in exc_info.value.details["valid_operators"]


def test_malformed_conditions_are_treated_as_non_matching(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        matched = matches_conditions({"field": "a", "op": "like", "value": 1}, _event(), rule_id="r-1")

    assert matched is False
    assert "r-1" in caplog.text


def test_evaluate_without_condition_matches() -> None:
    assert evaluate(None, _event()) is True

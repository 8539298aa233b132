from __future__ import annotations

import pytest

from ucp_schema.core.types import Direction, ResolveOptions
from ucp_schema.errors import InvalidSchema, SchemaError, ValidationFailed, exit_code_for
from ucp_schema.validator import validate, validate_against_schema

pytestmark = [pytest.mark.unit, pytest.mark.resolve]

CHECKOUT = {
    "type": "object",
    "required": ["id", "currency"],
    "properties": {
        "id": {"type": "string", "ucp_request": {"create": "omit", "update": "required"}},
        "currency": {"type": "string", "minLength": 3, "maxLength": 3},
        "line_items": {
            "type": "array",
            "items": {"type": "object", "required": ["qty"], "properties": {"qty": {"type": "integer"}}},
        },
    },
}


def test_valid_payload_passes():
    validate(CHECKOUT, {"currency": "USD"}, ResolveOptions(direction=Direction.REQUEST, operation="create"))


def test_required_after_resolution():
    options = ResolveOptions(direction=Direction.REQUEST, operation="update")
    with pytest.raises(ValidationFailed) as ei:
        validate(CHECKOUT, {"currency": "USD"}, options)
    assert [e.path for e in ei.value.errors] == [""]
    assert "'id' is a required property" in ei.value.errors[0].message
    assert exit_code_for(ei.value) == 1


def test_errors_point_into_payload_and_are_sorted():
    payload = {"currency": "US", "line_items": [{"qty": 1}, {"qty": "two"}, {}]}
    with pytest.raises(ValidationFailed) as ei:
        validate(CHECKOUT, payload, ResolveOptions(direction=Direction.REQUEST, operation="create"))
    paths = [e.path for e in ei.value.errors]
    assert paths == sorted(paths)
    assert set(paths) == {"/currency", "/line_items/1/qty", "/line_items/2"}


def test_strict_rejects_unknown_fields():
    options = ResolveOptions(direction=Direction.REQUEST, operation="create", strict=True)
    with pytest.raises(ValidationFailed) as ei:
        validate(CHECKOUT, {"currency": "USD", "extra": 1}, options)
    assert ei.value.errors[0].path == ""
    assert "extra" in ei.value.errors[0].message

    lenient = ResolveOptions(direction=Direction.REQUEST, operation="create")
    validate(CHECKOUT, {"currency": "USD", "extra": 1}, lenient)


def test_omitted_field_is_unconstrained_without_strict():
    # once "id" is dropped its type no longer applies
    validate(CHECKOUT, {"currency": "USD", "id": 42}, ResolveOptions(direction=Direction.REQUEST, operation="create"))


def test_invalid_schema():
    with pytest.raises(InvalidSchema):
        validate_against_schema({"type": 12}, {})


def test_schema_error_str():
    assert str(SchemaError(path="/a/0", message="bad")) == "/a/0: bad"

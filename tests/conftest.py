"""Shared test fixtures."""

from pathlib import Path
from typing import Any, Literal

import pytest

from bbkit.contracts import ContractRegistry
from bbkit.models import OperationContract
from bbkit.schemas.base import Identifier, NonEmptyStr, OperationInput, ValidationSchema, operation
from bbkit.service import SchemaService

_ENV_KEYS = ("DEFAULT_PROFILE", "PLATFORM", "BASE_URL", "TOKEN", "USERNAME", "APP_PASSWORD", "TIMEOUT")


class WidgetInput(OperationInput):
    workspace: NonEmptyStr
    widget_id: Identifier
    color: Literal["red", "green"] | None = None


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # keep a developer's own BBKIT_* vars and .env out of the results
    for key in _ENV_KEYS:
        monkeypatch.delenv(f"BBKIT_{key}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def widget_contract() -> OperationContract:
    return operation(
        "test.widgets.get",
        "GET",
        "/2.0/widgets/{workspace}/{widget_id}",
        "Get a widget.",
        WidgetInput,
    )


@pytest.fixture
def fake_registry(widget_contract: OperationContract) -> ContractRegistry:
    return ContractRegistry([widget_contract])


@pytest.fixture
def service() -> SchemaService:
    return SchemaService()


def _example(prop: dict, defs: dict) -> Any:
    if "$ref" in prop:
        return _example_object(defs[prop["$ref"].rsplit("/", 1)[-1]], defs)
    if "allOf" in prop:
        return _example(prop["allOf"][0], defs)
    if "anyOf" in prop:
        return _example(next(p for p in prop["anyOf"] if p.get("type") != "null"), defs)
    if "const" in prop:
        return prop["const"]
    if "enum" in prop:
        return prop["enum"][0]
    match prop.get("type"):
        case "integer" | "number":
            return max(prop.get("minimum", 1), 1)
        case "string":
            return "x" * max(prop.get("minLength", 1), 1)
        case "boolean":
            return True
        case "array":
            return [_example(prop["items"], defs) for _ in range(prop.get("minItems", 0))]
        case _:
            return _example_object(prop, defs)


def _example_object(schema: dict, defs: dict) -> dict:
    required = schema.get("required", [])
    return {name: _example(prop, defs) for name, prop in schema.get("properties", {}).items() if name in required}


def _minimal_payload(schema: ValidationSchema) -> dict:
    """Smallest payload a schema accepts: required fields, plus one field for update operations."""
    json_schema = schema.json_schema()
    defs = json_schema.get("$defs", {})
    payload = _example_object(json_schema, defs)
    mutable = getattr(schema.model, "mutable_fields", ())
    if mutable:
        payload[mutable[0]] = _example(json_schema["properties"][mutable[0]], defs)
    return payload


@pytest.fixture
def minimal_payload():
    return _minimal_payload

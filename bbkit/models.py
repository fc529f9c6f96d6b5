"""Shared models — the contract between the registry, the service and main.py."""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from bbkit.schemas.base import ValidationSchema

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str  # dotted field path, "" for object-level rules
    message: str
    code: str = "custom"  # pydantic error type, e.g. "missing", "literal_error"


class ValidationResult(BaseModel):
    """Outcome of validating a payload. Invalid input is data, not an exception."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: dict[str, Any] | None = None
    issues: list[ValidationIssue] = []

    def paths(self) -> list[str]:
        return [issue.path for issue in self.issues]


@dataclass(frozen=True)
class OperationContract:
    id: str  # bitbucket.pull-requests.create
    method: HttpMethod
    path: str  # /2.0/repositories/{workspace}/{repo_slug}/pullrequests
    description: str
    schema: "ValidationSchema"

    @property
    def path_params(self) -> list[str]:
        return _PLACEHOLDER.findall(self.path)

    @property
    def platform(self) -> str:
        return "datacenter" if self.path.startswith("/rest/") else "cloud"

    def render_path(self, values: dict[str, Any]) -> str:
        """Substitute {placeholders} from values. Raises KeyError on a missing one."""
        return _PLACEHOLDER.sub(lambda m: quote(str(values[m.group(1)]), safe=""), self.path)

    def split_payload(self, payload: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any], Any]:
        """Split a validated payload into (path values, query params, JSON body)."""
        path_names = set(self.path_params)
        path_values = {k: v for k, v in payload.items() if k in path_names}
        rest = {k: v for k, v in payload.items() if k not in path_names}

        if self.method in ("GET", "DELETE"):
            return path_values, rest, None

        query_names = set(self.schema.query_fields)
        query = {k: v for k, v in rest.items() if k in query_names}
        body_fields = {k: v for k, v in rest.items() if k not in query_names}
        if set(body_fields) == {"body"}:
            return path_values, query, body_fields["body"]
        return path_values, query, body_fields or None

"""Building blocks for per-operation input schemas.

Every operation gets its own pydantic model. ``ValidationSchema`` wraps the model so
callers get a ``ValidationResult`` instead of an exception for bad input.
"""

from collections.abc import Iterable
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, model_validator
from pydantic_core import ErrorDetails

from bbkit.models import HttpMethod, OperationContract, ValidationIssue, ValidationResult


def _reject_bool(value: Any) -> Any:
    # lax mode would read true as 1
    if isinstance(value, bool):
        raise ValueError("Input should be a valid integer, not a boolean")
    return value


Integer = Annotated[int, BeforeValidator(_reject_bool)]

NonEmptyStr = Annotated[str, Field(min_length=1)]
Identifier = Annotated[Integer, Field(ge=1)]
NonNegative = Annotated[Integer, Field(ge=0)]
Page = Annotated[Integer, Field(ge=1, description="Page number (1-based)")]
PageLen = Annotated[Integer, Field(ge=1, le=100, description="Items per page (max 100)")]
Workspace = Annotated[str, Field(min_length=1, description="Workspace slug or UUID")]
RepoSlug = Annotated[str, Field(min_length=1, description="Repository slug")]


class OperationInput(BaseModel):
    # Unknown keys are dropped, the way the CLI and tool layers expect.
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Paginated(OperationInput):
    page: Page | None = None
    pagelen: PageLen | None = None


class RepositoryInput(OperationInput):
    workspace: Workspace
    repo_slug: RepoSlug


class RequiresChange(OperationInput):
    """Update-style input: at least one of ``mutable_fields`` must be supplied."""

    mutable_fields: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def require_a_change(self):
        supplied = [name for name in self.mutable_fields if name in self.model_fields_set and getattr(self, name) is not None]
        if self.mutable_fields and not supplied:
            raise ValueError(f"You must provide at least one field to update: {', '.join(self.mutable_fields)}")
        return self


def _issue_from_error(error: ErrorDetails) -> ValidationIssue:
    path = ".".join(str(part) for part in error["loc"])
    ctx = error.get("ctx") or {}
    match error["type"]:
        case "literal_error" | "enum":
            message = f"Invalid enum value. Expected {ctx.get('expected')}, received {error['input']!r}"
        case "value_error" | "assertion_error" if "error" in ctx:
            message = str(ctx["error"])
        case _:
            message = error["msg"]
    return ValidationIssue(path=path, message=message, code=error["type"])


class ValidationSchema:
    """Validates operation input against one pydantic model.

    ``query_fields`` names the fields a write operation sends in the query string
    rather than the JSON body.
    """

    def __init__(self, model: type[OperationInput], query_fields: Iterable[str] = ()) -> None:
        self.model = model
        self.query_fields = tuple(query_fields)

    def __repr__(self) -> str:
        return f"ValidationSchema({self.model.__name__})"

    @property
    def required_fields(self) -> list[str]:
        return [
            field.alias or name for name, field in self.model.model_fields.items() if field.is_required()
        ]

    @property
    def fields(self) -> list[str]:
        return [field.alias or name for name, field in self.model.model_fields.items()]

    def json_schema(self) -> dict[str, Any]:
        return self.model.model_json_schema(by_alias=True)

    def validate(self, data: Any) -> ValidationResult:
        try:
            instance = self.model.model_validate(data)
        except ValidationError as exc:
            return ValidationResult(success=False, issues=[_issue_from_error(e) for e in exc.errors()])
        return ValidationResult(success=True, data=instance.model_dump(by_alias=True, exclude_unset=True))


def operation(
    id: str,
    method: HttpMethod,
    path: str,
    description: str,
    model: type[OperationInput],
    *,
    query: Iterable[str] = (),
) -> OperationContract:
    return OperationContract(
        id=id,
        method=method,
        path=path,
        description=description,
        schema=ValidationSchema(model, query_fields=query),
    )

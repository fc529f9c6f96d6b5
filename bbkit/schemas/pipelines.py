"""Bitbucket Cloud pipelines and pipeline variable operations."""

from typing import ClassVar, Literal

from pydantic import Field

from bbkit.schemas.base import (
    NonEmptyStr,
    OperationInput,
    Paginated,
    RepositoryInput,
    RequiresChange,
    operation,
)

RefType = Literal["branch", "tag", "bookmark", "named_branch"]

_PIPELINES = "/2.0/repositories/{workspace}/{repo_slug}/pipelines"
_PIPELINE = _PIPELINES + "/{pipeline_uuid}"
_VARIABLES = "/2.0/repositories/{workspace}/{repo_slug}/pipelines_config/variables"


class PipelineInput(RepositoryInput):
    pipeline_uuid: NonEmptyStr


class ListPipelines(RepositoryInput, Paginated):
    sort: NonEmptyStr | None = None


class GetPipeline(PipelineInput):
    pass


class PipelineSelector(OperationInput):
    type: Literal["custom", "branches", "tags", "pull-requests", "default"]
    pattern: NonEmptyStr


class PipelineTarget(OperationInput):
    type: Literal["pipeline_ref_target"]
    ref_type: RefType
    ref_name: NonEmptyStr
    selector: PipelineSelector | None = None


class PipelineVariable(OperationInput):
    key: NonEmptyStr
    value: str
    secured: bool | None = None


class TriggerPipeline(RepositoryInput):
    target: PipelineTarget
    variables: list[PipelineVariable] | None = None


class StopPipeline(PipelineInput):
    pass


class ListSteps(PipelineInput, Paginated):
    pass


class GetStepLog(PipelineInput):
    step_uuid: NonEmptyStr


class ListVariables(RepositoryInput, Paginated):
    pass


class CreateVariable(RepositoryInput):
    key: NonEmptyStr
    value: str
    secured: bool | None = None


class UpdateVariable(RepositoryInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("key", "value", "secured")

    variable_uuid: NonEmptyStr
    key: NonEmptyStr | None = None
    value: str | None = None
    secured: bool | None = None


class DeleteVariable(RepositoryInput):
    variable_uuid: NonEmptyStr = Field(description="Variable UUID including braces")


CONTRACTS = [
    operation(
        "bitbucket.pipelines.list",
        "GET",
        _PIPELINES,
        "List pipeline runs for a repository, most recent first with sort=-created_on.",
        ListPipelines,
    ),
    operation(
        "bitbucket.pipelines.get",
        "GET",
        _PIPELINE,
        "Get a pipeline run by uuid, including its state and build number.",
        GetPipeline,
    ),
    operation(
        "bitbucket.pipelines.trigger",
        "POST",
        _PIPELINES,
        "Trigger a pipeline run on a branch or tag, optionally a custom pipeline via selector.",
        TriggerPipeline,
    ),
    operation(
        "bitbucket.pipelines.stop",
        "POST",
        _PIPELINE + "/stopPipeline",
        "Stop a running pipeline.",
        StopPipeline,
    ),
    operation(
        "bitbucket.pipelines.steps.list",
        "GET",
        _PIPELINE + "/steps",
        "List the steps of a pipeline run.",
        ListSteps,
    ),
    operation(
        "bitbucket.pipelines.steps.log",
        "GET",
        _PIPELINE + "/steps/{step_uuid}/log",
        "Get the raw log output of a pipeline step.",
        GetStepLog,
    ),
    operation(
        "bitbucket.pipelines.variables.list",
        "GET",
        _VARIABLES,
        "List repository-level pipeline variables.",
        ListVariables,
    ),
    operation(
        "bitbucket.pipelines.variables.create",
        "POST",
        _VARIABLES,
        "Create a repository-level pipeline variable. Secured variables are write-only.",
        CreateVariable,
    ),
    operation(
        "bitbucket.pipelines.variables.update",
        "PUT",
        _VARIABLES + "/{variable_uuid}",
        "Update the key, value or secured flag of a pipeline variable.",
        UpdateVariable,
    ),
    operation(
        "bitbucket.pipelines.variables.delete",
        "DELETE",
        _VARIABLES + "/{variable_uuid}",
        "Delete a repository-level pipeline variable.",
        DeleteVariable,
    ),
]

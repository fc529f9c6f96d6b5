"""Bitbucket Cloud repository, ref and webhook operations."""

from typing import Annotated, ClassVar, Literal

from pydantic import Field

from bbkit.schemas.base import (
    NonEmptyStr,
    OperationInput,
    Paginated,
    RepositoryInput,
    RequiresChange,
    Workspace,
    operation,
)

ForkPolicy = Literal["allow_forks", "no_public_forks", "no_forks"]
RepositoryRole = Literal["member", "contributor", "admin", "owner"]

EventList = Annotated[list[NonEmptyStr], Field(min_length=1, description="Webhook events, e.g. repo:push")]

_REPOSITORY = "/2.0/repositories/{workspace}/{repo_slug}"


class ProjectRef(OperationInput):
    key: NonEmptyStr


class CommitRef(OperationInput):
    hash: NonEmptyStr


class ListRepositories(Paginated):
    workspace: Workspace
    role: RepositoryRole | None = None
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetRepository(RepositoryInput):
    pass


class CreateRepository(RepositoryInput):
    scm: Literal["git"] | None = None
    is_private: bool | None = None
    description: str | None = None
    fork_policy: ForkPolicy | None = None
    language: str | None = None
    project: ProjectRef | None = None


class UpdateRepository(RepositoryInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = (
        "name",
        "description",
        "is_private",
        "fork_policy",
        "language",
        "project",
    )

    name: NonEmptyStr | None = None
    description: str | None = None
    is_private: bool | None = None
    fork_policy: ForkPolicy | None = None
    language: str | None = None
    project: ProjectRef | None = None


class DeleteRepository(RepositoryInput):
    redirect_to: NonEmptyStr | None = None


class ListForks(RepositoryInput, Paginated):
    role: RepositoryRole | None = None


class CreateFork(RepositoryInput):
    name: NonEmptyStr | None = None
    is_private: bool | None = None


# ---------------------------------------------------------------------------
# Branches and tags
# ---------------------------------------------------------------------------


class ListBranches(RepositoryInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetBranch(RepositoryInput):
    name: NonEmptyStr


class CreateBranch(RepositoryInput):
    name: NonEmptyStr
    target: CommitRef


class DeleteBranch(RepositoryInput):
    name: NonEmptyStr


class ListTags(RepositoryInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetTag(RepositoryInput):
    name: NonEmptyStr


class CreateTag(RepositoryInput):
    name: NonEmptyStr
    target: CommitRef
    message: NonEmptyStr | None = None  # annotated tag message


class DeleteTag(RepositoryInput):
    name: NonEmptyStr


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


class ListWebhooks(RepositoryInput, Paginated):
    pass


class GetWebhook(RepositoryInput):
    uid: NonEmptyStr


class CreateWebhook(RepositoryInput):
    url: NonEmptyStr
    events: EventList
    description: str | None = None
    active: bool | None = None
    secret: NonEmptyStr | None = None


class UpdateWebhook(RepositoryInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("url", "events", "description", "active", "secret")

    uid: NonEmptyStr
    url: NonEmptyStr | None = None
    events: EventList | None = None
    description: str | None = None
    active: bool | None = None
    secret: NonEmptyStr | None = None


class DeleteWebhook(RepositoryInput):
    uid: NonEmptyStr


CONTRACTS = [
    operation(
        "bitbucket.repositories.list",
        "GET",
        "/2.0/repositories/{workspace}",
        "List repositories in a workspace, optionally filtered by the caller's role.",
        ListRepositories,
    ),
    operation(
        "bitbucket.repositories.get",
        "GET",
        _REPOSITORY,
        "Get a repository by workspace and slug.",
        GetRepository,
    ),
    operation(
        "bitbucket.repositories.create",
        "POST",
        _REPOSITORY,
        "Create a repository in a workspace, optionally inside a project.",
        CreateRepository,
    ),
    operation(
        "bitbucket.repositories.update",
        "PUT",
        _REPOSITORY,
        "Update repository settings such as name, description, visibility or fork policy.",
        UpdateRepository,
    ),
    operation(
        "bitbucket.repositories.delete",
        "DELETE",
        _REPOSITORY,
        "Delete a repository. This cannot be undone.",
        DeleteRepository,
    ),
    operation(
        "bitbucket.repositories.forks.list",
        "GET",
        _REPOSITORY + "/forks",
        "List the forks of a repository.",
        ListForks,
    ),
    operation(
        "bitbucket.repositories.forks.create",
        "POST",
        _REPOSITORY + "/forks",
        "Fork a repository into the authenticated user's workspace.",
        CreateFork,
    ),
    operation(
        "bitbucket.repositories.branches.list",
        "GET",
        _REPOSITORY + "/refs/branches",
        "List the branches of a repository.",
        ListBranches,
    ),
    operation(
        "bitbucket.repositories.branches.get",
        "GET",
        _REPOSITORY + "/refs/branches/{name}",
        "Get a branch by name, including its head commit.",
        GetBranch,
    ),
    operation(
        "bitbucket.repositories.branches.create",
        "POST",
        _REPOSITORY + "/refs/branches",
        "Create a branch pointing at the target commit hash.",
        CreateBranch,
    ),
    operation(
        "bitbucket.repositories.branches.delete",
        "DELETE",
        _REPOSITORY + "/refs/branches/{name}",
        "Delete a branch.",
        DeleteBranch,
    ),
    operation(
        "bitbucket.repositories.tags.list",
        "GET",
        _REPOSITORY + "/refs/tags",
        "List the tags of a repository.",
        ListTags,
    ),
    operation(
        "bitbucket.repositories.tags.get",
        "GET",
        _REPOSITORY + "/refs/tags/{name}",
        "Get a tag by name.",
        GetTag,
    ),
    operation(
        "bitbucket.repositories.tags.create",
        "POST",
        _REPOSITORY + "/refs/tags",
        "Create a tag pointing at the target commit hash.",
        CreateTag,
    ),
    operation(
        "bitbucket.repositories.tags.delete",
        "DELETE",
        _REPOSITORY + "/refs/tags/{name}",
        "Delete a tag.",
        DeleteTag,
    ),
    operation(
        "bitbucket.repositories.webhooks.list",
        "GET",
        _REPOSITORY + "/hooks",
        "List the webhooks installed on a repository.",
        ListWebhooks,
    ),
    operation(
        "bitbucket.repositories.webhooks.get",
        "GET",
        _REPOSITORY + "/hooks/{uid}",
        "Get a repository webhook by uid.",
        GetWebhook,
    ),
    operation(
        "bitbucket.repositories.webhooks.create",
        "POST",
        _REPOSITORY + "/hooks",
        "Install a webhook on a repository for the given events (e.g. repo:push).",
        CreateWebhook,
    ),
    operation(
        "bitbucket.repositories.webhooks.update",
        "PUT",
        _REPOSITORY + "/hooks/{uid}",
        "Update the url, events or active flag of a repository webhook.",
        UpdateWebhook,
    ),
    operation(
        "bitbucket.repositories.webhooks.delete",
        "DELETE",
        _REPOSITORY + "/hooks/{uid}",
        "Delete a repository webhook.",
        DeleteWebhook,
    ),
]

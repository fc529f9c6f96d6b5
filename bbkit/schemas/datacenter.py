"""Bitbucket Data Center (REST 1.0) project, repository and pull request operations.

Data Center paths use camelCase placeholders (``projectKey``, ``repositorySlug``,
``pullRequestId``), so the input fields do too. Paging is ``start``/``limit``
rather than ``page``/``pagelen``.
"""

from typing import Annotated, ClassVar, Literal

from pydantic import Field

from bbkit.schemas.base import Identifier, Integer, NonEmptyStr, NonNegative, OperationInput, RequiresChange, operation

Start = Annotated[Integer, Field(ge=0, description="Index of the first result")]
Limit = Annotated[Integer, Field(ge=1, le=1000, description="Page size (server max 1000)")]
ProjectKey = Annotated[str, Field(min_length=1, description="Project key, e.g. PRJ")]
Version = Annotated[Integer, Field(ge=0, description="Current version, for optimistic locking")]

PullRequestState = Literal["OPEN", "DECLINED", "MERGED", "ALL"]
PullRequestOrder = Literal["OLDEST", "NEWEST"]
PullRequestDirection = Literal["INCOMING", "OUTGOING"]
MergeStrategyId = Literal["no-ff", "ff", "ff-only", "squash", "squash-ff-only", "rebase-no-ff", "rebase-ff-only"]

_PROJECT = "/rest/api/1.0/projects/{projectKey}"
_REPO = _PROJECT + "/repos/{repositorySlug}"
_PULL_REQUESTS = _REPO + "/pull-requests"
_PULL_REQUEST = _PULL_REQUESTS + "/{pullRequestId}"


class PagedInput(OperationInput):
    start: Start | None = None
    limit: Limit | None = None


class ProjectInput(OperationInput):
    projectKey: ProjectKey


class RepoInput(ProjectInput):
    repositorySlug: NonEmptyStr


class PullRequestInput(RepoInput):
    pullRequestId: Identifier


class ProjectRef(OperationInput):
    key: ProjectKey


class RepositoryRef(OperationInput):
    slug: NonEmptyStr
    project: ProjectRef


class Ref(OperationInput):
    id: NonEmptyStr  # refs/heads/feature
    repository: RepositoryRef | None = None  # same repository when omitted


class UserName(OperationInput):
    name: NonEmptyStr


class ReviewerRef(OperationInput):
    user: UserName


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ListProjects(PagedInput):
    name: NonEmptyStr | None = None
    permission: NonEmptyStr | None = None


class GetProject(ProjectInput):
    pass


class CreateProject(OperationInput):
    key: ProjectKey
    name: NonEmptyStr
    description: str | None = None
    public: bool | None = None


class UpdateProject(ProjectInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("key", "name", "description", "public")

    key: ProjectKey | None = None
    name: NonEmptyStr | None = None
    description: str | None = None
    public: bool | None = None


class DeleteProject(ProjectInput):
    pass


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class ListRepos(ProjectInput, PagedInput):
    pass


class GetRepo(RepoInput):
    pass


class CreateRepo(ProjectInput):
    name: NonEmptyStr
    scmId: Literal["git"] | None = None
    forkable: bool | None = None
    defaultBranch: NonEmptyStr | None = None


class DeleteRepo(RepoInput):
    pass


class ListBranches(RepoInput, PagedInput):
    filterText: NonEmptyStr | None = None
    orderBy: Literal["ALPHABETICAL", "MODIFICATION"] | None = None


# ---------------------------------------------------------------------------
# Pull requests
# ---------------------------------------------------------------------------


class ListPullRequests(RepoInput, PagedInput):
    state: PullRequestState | None = None
    direction: PullRequestDirection | None = None
    order: PullRequestOrder | None = None
    at: NonEmptyStr | None = None  # refs/heads/main


class GetPullRequest(PullRequestInput):
    pass


class CreatePullRequest(RepoInput):
    title: NonEmptyStr
    description: str | None = None
    fromRef: Ref
    toRef: Ref
    reviewers: list[ReviewerRef] | None = None


class UpdatePullRequest(PullRequestInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("title", "description", "reviewers", "toRef")

    version: Version
    title: NonEmptyStr | None = None
    description: str | None = None
    reviewers: list[ReviewerRef] | None = None
    toRef: Ref | None = None


class MergePullRequest(PullRequestInput):
    version: Version
    message: NonEmptyStr | None = None
    strategyId: MergeStrategyId | None = None


class DeclinePullRequest(PullRequestInput):
    version: Version
    comment: NonEmptyStr | None = None


class ApprovePullRequest(PullRequestInput):
    pass


class PullRequestDiff(PullRequestInput):
    contextLines: NonNegative | None = None
    whitespace: Literal["ignore-all", "show"] | None = None


class ListComments(PullRequestInput, PagedInput):
    path: NonEmptyStr  # server requires a file path for comment listing


class CommentParent(OperationInput):
    id: Identifier


class CreateComment(PullRequestInput):
    text: NonEmptyStr
    parent: CommentParent | None = None


CONTRACTS = [
    operation(
        "bitbucket.datacenter.projects.list",
        "GET",
        "/rest/api/1.0/projects",
        "List Data Center projects visible to the user, filtered by name or permission.",
        ListProjects,
    ),
    operation(
        "bitbucket.datacenter.projects.get",
        "GET",
        _PROJECT,
        "Get a Data Center project by key.",
        GetProject,
    ),
    operation(
        "bitbucket.datacenter.projects.create",
        "POST",
        "/rest/api/1.0/projects",
        "Create a Data Center project with a unique key.",
        CreateProject,
    ),
    operation(
        "bitbucket.datacenter.projects.update",
        "PUT",
        _PROJECT,
        "Update a Data Center project's key, name, description or visibility.",
        UpdateProject,
    ),
    operation(
        "bitbucket.datacenter.projects.delete",
        "DELETE",
        _PROJECT,
        "Delete an empty Data Center project.",
        DeleteProject,
    ),
    operation(
        "bitbucket.datacenter.repositories.list",
        "GET",
        _PROJECT + "/repos",
        "List the repositories in a Data Center project.",
        ListRepos,
    ),
    operation(
        "bitbucket.datacenter.repositories.get",
        "GET",
        _REPO,
        "Get a Data Center repository by project key and slug.",
        GetRepo,
    ),
    operation(
        "bitbucket.datacenter.repositories.create",
        "POST",
        _PROJECT + "/repos",
        "Create a repository in a Data Center project.",
        CreateRepo,
    ),
    operation(
        "bitbucket.datacenter.repositories.delete",
        "DELETE",
        _REPO,
        "Schedule a Data Center repository for deletion.",
        DeleteRepo,
    ),
    operation(
        "bitbucket.datacenter.repositories.branches.list",
        "GET",
        _REPO + "/branches",
        "List the branches of a Data Center repository.",
        ListBranches,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.list",
        "GET",
        _PULL_REQUESTS,
        "List pull requests in a Data Center repository by state, direction and order.",
        ListPullRequests,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.get",
        "GET",
        _PULL_REQUEST,
        "Get a Data Center pull request by id.",
        GetPullRequest,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.create",
        "POST",
        _PULL_REQUESTS,
        "Create a Data Center pull request from fromRef into toRef.",
        CreatePullRequest,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.update",
        "PUT",
        _PULL_REQUEST,
        "Update a Data Center pull request. Requires the current version.",
        UpdatePullRequest,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.merge",
        "POST",
        _PULL_REQUEST + "/merge",
        "Merge a Data Center pull request at the given version.",
        MergePullRequest,
        query=("version",),
    ),
    operation(
        "bitbucket.datacenter.pull-requests.decline",
        "POST",
        _PULL_REQUEST + "/decline",
        "Decline a Data Center pull request at the given version, with an optional comment.",
        DeclinePullRequest,
        query=("version",),
    ),
    operation(
        "bitbucket.datacenter.pull-requests.approve",
        "POST",
        _PULL_REQUEST + "/approve",
        "Approve a Data Center pull request as the authenticated user.",
        ApprovePullRequest,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.diff",
        "GET",
        _PULL_REQUEST + "/diff",
        "Get the diff of a Data Center pull request.",
        PullRequestDiff,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.comments.list",
        "GET",
        _PULL_REQUEST + "/comments",
        "List the comments on a file in a Data Center pull request.",
        ListComments,
    ),
    operation(
        "bitbucket.datacenter.pull-requests.comments.create",
        "POST",
        _PULL_REQUEST + "/comments",
        "Add a comment to a Data Center pull request, or reply via parent.id.",
        CreateComment,
    ),
]

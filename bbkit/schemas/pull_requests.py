"""Bitbucket Cloud pull request operations."""

from typing import ClassVar, Literal

from pydantic import Field

from bbkit.schemas.base import (
    Identifier,
    NonEmptyStr,
    OperationInput,
    Paginated,
    RepositoryInput,
    RequiresChange,
    operation,
)

PullRequestState = Literal["OPEN", "MERGED", "DECLINED", "SUPERSEDED"]
MergeStrategy = Literal[
    "merge_commit",
    "squash",
    "fast_forward",
    "squash_fast_forward",
    "rebase_fast_forward",
    "rebase_merge",
]

_PULLREQUESTS = "/2.0/repositories/{workspace}/{repo_slug}/pullrequests"
_PULLREQUEST = _PULLREQUESTS + "/{pull_request_id}"


class PullRequestInput(RepositoryInput):
    pull_request_id: Identifier


class BranchRef(OperationInput):
    name: NonEmptyStr


class Endpoint(OperationInput):
    branch: BranchRef


class Reviewer(OperationInput):
    uuid: NonEmptyStr


class CommentContent(OperationInput):
    raw: NonEmptyStr


class InlineAnchor(OperationInput):
    path: NonEmptyStr
    from_: Identifier | None = Field(default=None, alias="from")
    to: Identifier | None = None


class ParentRef(OperationInput):
    id: Identifier


# ---------------------------------------------------------------------------
# Pull requests
# ---------------------------------------------------------------------------


class ListPullRequests(RepositoryInput, Paginated):
    state: PullRequestState | None = None
    q: NonEmptyStr | None = None  # BBQL filter
    sort: NonEmptyStr | None = None


class GetPullRequest(PullRequestInput):
    pass


class NewPullRequest(OperationInput):
    title: NonEmptyStr
    source: Endpoint
    destination: Endpoint | None = None  # repository main branch when omitted
    description: str | None = None
    close_source_branch: bool | None = None
    reviewers: list[Reviewer] | None = None


class CreatePullRequest(RepositoryInput):
    body: NewPullRequest


class UpdatePullRequest(PullRequestInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("title", "description", "reviewers", "destination", "close_source_branch")

    title: NonEmptyStr | None = None
    description: str | None = None
    reviewers: list[Reviewer] | None = None
    destination: Endpoint | None = None
    close_source_branch: bool | None = None


class DeclinePullRequest(PullRequestInput):
    pass


class MergePullRequest(PullRequestInput):
    merge_strategy: MergeStrategy | None = None
    message: NonEmptyStr | None = None
    close_source_branch: bool | None = None


class ApprovePullRequest(PullRequestInput):
    pass


class UnapprovePullRequest(PullRequestInput):
    pass


class RequestChanges(PullRequestInput):
    pass


class RemoveChangeRequest(PullRequestInput):
    pass


class PullRequestDiff(PullRequestInput):
    pass


class PullRequestDiffstat(PullRequestInput, Paginated):
    pass


class PullRequestPatch(PullRequestInput):
    pass


class PullRequestActivity(PullRequestInput, Paginated):
    pass


class PullRequestCommits(PullRequestInput, Paginated):
    pass


class PullRequestStatuses(PullRequestInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class ListComments(PullRequestInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetComment(PullRequestInput):
    comment_id: Identifier


class CreateComment(PullRequestInput):
    content: CommentContent
    inline: InlineAnchor | None = None
    parent: ParentRef | None = None  # reply to an existing comment


class UpdateComment(PullRequestInput):
    comment_id: Identifier
    content: CommentContent


class DeleteComment(PullRequestInput):
    comment_id: Identifier


CONTRACTS = [
    operation(
        "bitbucket.pull-requests.list",
        "GET",
        _PULLREQUESTS,
        "List pull requests in a repository, optionally filtered by state (OPEN by default).",
        ListPullRequests,
    ),
    operation(
        "bitbucket.pull-requests.get",
        "GET",
        _PULLREQUEST,
        "Get a single pull request by id.",
        GetPullRequest,
    ),
    operation(
        "bitbucket.pull-requests.create",
        "POST",
        _PULLREQUESTS,
        "Create a pull request from a source branch into a destination branch.",
        CreatePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.update",
        "PUT",
        _PULLREQUEST,
        "Update the title, description, reviewers or destination of an open pull request.",
        UpdatePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.decline",
        "POST",
        _PULLREQUEST + "/decline",
        "Decline a pull request without merging it.",
        DeclinePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.merge",
        "POST",
        _PULLREQUEST + "/merge",
        "Merge a pull request using the given merge strategy and optional commit message.",
        MergePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.approve",
        "POST",
        _PULLREQUEST + "/approve",
        "Approve a pull request as the authenticated user.",
        ApprovePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.unapprove",
        "DELETE",
        _PULLREQUEST + "/approve",
        "Remove the authenticated user's approval from a pull request.",
        UnapprovePullRequest,
    ),
    operation(
        "bitbucket.pull-requests.request-changes",
        "POST",
        _PULLREQUEST + "/request-changes",
        "Request changes on a pull request as the authenticated user.",
        RequestChanges,
    ),
    operation(
        "bitbucket.pull-requests.remove-change-request",
        "DELETE",
        _PULLREQUEST + "/request-changes",
        "Withdraw the authenticated user's change request on a pull request.",
        RemoveChangeRequest,
    ),
    operation(
        "bitbucket.pull-requests.diff",
        "GET",
        _PULLREQUEST + "/diff",
        "Get the unified diff of a pull request.",
        PullRequestDiff,
    ),
    operation(
        "bitbucket.pull-requests.diffstat",
        "GET",
        _PULLREQUEST + "/diffstat",
        "Get the diffstat (files changed, lines added and removed) of a pull request.",
        PullRequestDiffstat,
    ),
    operation(
        "bitbucket.pull-requests.patch",
        "GET",
        _PULLREQUEST + "/patch",
        "Get the raw patch of a pull request.",
        PullRequestPatch,
    ),
    operation(
        "bitbucket.pull-requests.activity",
        "GET",
        _PULLREQUEST + "/activity",
        "List the activity log (updates, approvals, comments) of a pull request.",
        PullRequestActivity,
    ),
    operation(
        "bitbucket.pull-requests.commits",
        "GET",
        _PULLREQUEST + "/commits",
        "List the commits included in a pull request.",
        PullRequestCommits,
    ),
    operation(
        "bitbucket.pull-requests.statuses",
        "GET",
        _PULLREQUEST + "/statuses",
        "List the build statuses reported against a pull request.",
        PullRequestStatuses,
    ),
    operation(
        "bitbucket.pull-requests.comments.list",
        "GET",
        _PULLREQUEST + "/comments",
        "List the comments on a pull request, including inline comments.",
        ListComments,
    ),
    operation(
        "bitbucket.pull-requests.comments.get",
        "GET",
        _PULLREQUEST + "/comments/{comment_id}",
        "Get a single comment on a pull request.",
        GetComment,
    ),
    operation(
        "bitbucket.pull-requests.comments.create",
        "POST",
        _PULLREQUEST + "/comments",
        "Add a comment to a pull request. Supply inline.path to comment on a file, parent.id to reply.",
        CreateComment,
    ),
    operation(
        "bitbucket.pull-requests.comments.update",
        "PUT",
        _PULLREQUEST + "/comments/{comment_id}",
        "Edit the content of an existing pull request comment.",
        UpdateComment,
    ),
    operation(
        "bitbucket.pull-requests.comments.delete",
        "DELETE",
        _PULLREQUEST + "/comments/{comment_id}",
        "Delete a comment on a pull request.",
        DeleteComment,
    ),
]

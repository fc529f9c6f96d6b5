"""Bitbucket Cloud commit and diff operations."""

from pydantic import Field

from bbkit.schemas.base import (
    NonNegative,
    NonEmptyStr,
    OperationInput,
    Paginated,
    RepositoryInput,
    operation,
)

_REPOSITORY = "/2.0/repositories/{workspace}/{repo_slug}"


class CommitInput(RepositoryInput):
    commit: NonEmptyStr = Field(description="Commit hash")


class ListCommits(RepositoryInput, Paginated):
    include: NonEmptyStr | None = None
    exclude: NonEmptyStr | None = None


class GetCommit(CommitInput):
    pass


class ApproveCommit(CommitInput):
    pass


class UnapproveCommit(CommitInput):
    pass


class ListCommitComments(CommitInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class CommitCommentContent(OperationInput):
    raw: NonEmptyStr


class CreateCommitComment(CommitInput):
    content: CommitCommentContent


class GetDiff(RepositoryInput):
    spec: NonEmptyStr = Field(description="Single commit or a revspec such as main..feature")
    context: NonNegative | None = None  # lines of context
    path: NonEmptyStr | None = None
    ignore_whitespace: bool | None = None


class GetDiffstat(RepositoryInput, Paginated):
    spec: NonEmptyStr = Field(description="Single commit or a revspec such as main..feature")
    path: NonEmptyStr | None = None
    ignore_whitespace: bool | None = None


CONTRACTS = [
    operation(
        "bitbucket.commits.list",
        "GET",
        _REPOSITORY + "/commits",
        "List commits reachable from include refs and not from exclude refs.",
        ListCommits,
    ),
    operation(
        "bitbucket.commits.get",
        "GET",
        _REPOSITORY + "/commit/{commit}",
        "Get a single commit by hash.",
        GetCommit,
    ),
    operation(
        "bitbucket.commits.approve",
        "POST",
        _REPOSITORY + "/commit/{commit}/approve",
        "Approve a commit as the authenticated user.",
        ApproveCommit,
    ),
    operation(
        "bitbucket.commits.unapprove",
        "DELETE",
        _REPOSITORY + "/commit/{commit}/approve",
        "Remove the authenticated user's approval from a commit.",
        UnapproveCommit,
    ),
    operation(
        "bitbucket.commits.comments.list",
        "GET",
        _REPOSITORY + "/commit/{commit}/comments",
        "List the comments on a commit.",
        ListCommitComments,
    ),
    operation(
        "bitbucket.commits.comments.create",
        "POST",
        _REPOSITORY + "/commit/{commit}/comments",
        "Add a comment to a commit.",
        CreateCommitComment,
    ),
    operation(
        "bitbucket.commits.diff",
        "GET",
        _REPOSITORY + "/diff/{spec}",
        "Get the raw unified diff for a commit or revspec.",
        GetDiff,
    ),
    operation(
        "bitbucket.commits.diffstat",
        "GET",
        _REPOSITORY + "/diffstat/{spec}",
        "Get the per-file diffstat for a commit or revspec.",
        GetDiffstat,
    ),
]

"""Bitbucket Cloud issue tracker operations."""

from typing import ClassVar, Literal

from bbkit.schemas.base import (
    Identifier,
    NonEmptyStr,
    OperationInput,
    Paginated,
    RepositoryInput,
    RequiresChange,
    operation,
)

IssueKind = Literal["bug", "enhancement", "proposal", "task"]
IssuePriority = Literal["trivial", "minor", "major", "critical", "blocker"]
IssueState = Literal["new", "open", "resolved", "on hold", "invalid", "duplicate", "wontfix", "closed"]

_ISSUES = "/2.0/repositories/{workspace}/{repo_slug}/issues"
_ISSUE = _ISSUES + "/{issue_id}"


class IssueInput(RepositoryInput):
    issue_id: Identifier


class IssueContent(OperationInput):
    raw: NonEmptyStr


class UserRef(OperationInput):
    account_id: NonEmptyStr


class ListIssues(RepositoryInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetIssue(IssueInput):
    pass


class CreateIssue(RepositoryInput):
    title: NonEmptyStr
    content: IssueContent | None = None
    kind: IssueKind | None = None
    priority: IssuePriority | None = None
    assignee: UserRef | None = None


class UpdateIssue(IssueInput, RequiresChange):
    mutable_fields: ClassVar[tuple[str, ...]] = ("title", "content", "kind", "priority", "state", "assignee")

    title: NonEmptyStr | None = None
    content: IssueContent | None = None
    kind: IssueKind | None = None
    priority: IssuePriority | None = None
    state: IssueState | None = None
    assignee: UserRef | None = None


class DeleteIssue(IssueInput):
    pass


class ListIssueComments(IssueInput, Paginated):
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class CreateIssueComment(IssueInput):
    content: IssueContent


CONTRACTS = [
    operation(
        "bitbucket.issues.list",
        "GET",
        _ISSUES,
        "List issues in a repository's issue tracker.",
        ListIssues,
    ),
    operation(
        "bitbucket.issues.get",
        "GET",
        _ISSUE,
        "Get a single issue by id.",
        GetIssue,
    ),
    operation(
        "bitbucket.issues.create",
        "POST",
        _ISSUES,
        "Create an issue with a title, kind and priority.",
        CreateIssue,
    ),
    operation(
        "bitbucket.issues.update",
        "PUT",
        _ISSUE,
        "Update an issue's title, content, kind, priority, state or assignee.",
        UpdateIssue,
    ),
    operation(
        "bitbucket.issues.delete",
        "DELETE",
        _ISSUE,
        "Delete an issue.",
        DeleteIssue,
    ),
    operation(
        "bitbucket.issues.comments.list",
        "GET",
        _ISSUE + "/comments",
        "List the comments on an issue.",
        ListIssueComments,
    ),
    operation(
        "bitbucket.issues.comments.create",
        "POST",
        _ISSUE + "/comments",
        "Add a comment to an issue.",
        CreateIssueComment,
    ),
]

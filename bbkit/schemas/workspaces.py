"""Bitbucket Cloud workspace and user operations."""

from typing import Literal

from bbkit.schemas.base import NonEmptyStr, OperationInput, Paginated, Workspace, operation

WorkspaceRole = Literal["member", "collaborator", "owner"]

_WORKSPACE = "/2.0/workspaces/{workspace}"


class ListWorkspaces(Paginated):
    role: WorkspaceRole | None = None
    q: NonEmptyStr | None = None
    sort: NonEmptyStr | None = None


class GetWorkspace(OperationInput):
    workspace: Workspace


class ListMembers(Paginated):
    workspace: Workspace


class GetMember(OperationInput):
    workspace: Workspace
    member: NonEmptyStr  # account UUID or account_id


class ListPermissions(Paginated):
    workspace: Workspace
    q: NonEmptyStr | None = None


class ListWorkspaceWebhooks(Paginated):
    workspace: Workspace


class CurrentUser(OperationInput):
    pass


CONTRACTS = [
    operation(
        "bitbucket.workspaces.list",
        "GET",
        "/2.0/workspaces",
        "List the workspaces the authenticated user belongs to.",
        ListWorkspaces,
    ),
    operation(
        "bitbucket.workspaces.get",
        "GET",
        _WORKSPACE,
        "Get a workspace by slug or UUID.",
        GetWorkspace,
    ),
    operation(
        "bitbucket.workspaces.members.list",
        "GET",
        _WORKSPACE + "/members",
        "List the members of a workspace.",
        ListMembers,
    ),
    operation(
        "bitbucket.workspaces.members.get",
        "GET",
        _WORKSPACE + "/members/{member}",
        "Get a single workspace member.",
        GetMember,
    ),
    operation(
        "bitbucket.workspaces.permissions.list",
        "GET",
        _WORKSPACE + "/permissions",
        "List member permissions (owner, collaborator, member) in a workspace.",
        ListPermissions,
    ),
    operation(
        "bitbucket.workspaces.webhooks.list",
        "GET",
        _WORKSPACE + "/hooks",
        "List the webhooks installed on a workspace.",
        ListWorkspaceWebhooks,
    ),
    operation(
        "bitbucket.users.current",
        "GET",
        "/2.0/user",
        "Get the currently authenticated user. Useful for checking credentials.",
        CurrentUser,
    ),
]

"""Tests for BitbucketClient using pytest-httpx."""

import base64
import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from bbkit.client import BitbucketClient, _query_params
from bbkit.contracts import default_registry
from bbkit.settings import BbkitSettings

PR = {"workspace": "acme", "repo_slug": "mobile-app", "pull_request_id": 42}


def _settings(**kwargs) -> BbkitSettings:
    defaults = {"platform": "cloud", "token": "tok_test"}
    defaults.update(kwargs)
    return BbkitSettings(**defaults)  # type: ignore[call-arg]


def _execute(client: BitbucketClient, operation_id: str, payload: dict):
    contract = default_registry()[operation_id]
    result = contract.schema.validate(payload)
    assert result.success, result.issues
    return client.execute(contract, result.data)


class TestAuth:
    def test_bearer_token(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"username": "ada"})
        _execute(BitbucketClient(_settings()), "bitbucket.users.current", {})
        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Bearer tok_test"
        assert str(request.url) == "https://api.bitbucket.org/2.0/user"

    def test_app_password_uses_basic_auth(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"username": "ada"})
        client = BitbucketClient(_settings(token=None, username="ada", app_password="pw"))
        _execute(client, "bitbucket.users.current", {})
        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"ada:pw").decode()

    def test_no_credentials_raises(self) -> None:
        with pytest.raises(RuntimeError, match="No Bitbucket credentials"):
            BitbucketClient(_settings(token=None))

    def test_401_raises_runtime_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=401)
        with pytest.raises(RuntimeError, match="bbkit init"):
            _execute(BitbucketClient(_settings()), "bitbucket.users.current", {})


class TestExecute:
    def test_get_sends_query_params(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"values": [], "page": 1})
        data = _execute(
            BitbucketClient(_settings()),
            "bitbucket.pull-requests.list",
            {"workspace": "acme", "repo_slug": "mobile-app", "state": "OPEN", "pagelen": 10},
        )
        assert data == {"values": [], "page": 1}
        request = httpx_mock.get_request()
        assert request is not None
        assert request.method == "GET"
        assert request.url.path == "/2.0/repositories/acme/mobile-app/pullrequests"
        assert dict(request.url.params) == {"state": "OPEN", "pagelen": "10"}

    def test_post_sends_json_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=201, json={"id": 7})
        data = _execute(
            BitbucketClient(_settings()),
            "bitbucket.pull-requests.comments.create",
            {**PR, "content": {"raw": "LGTM"}},
        )
        assert data == {"id": 7}
        request = httpx_mock.get_request()
        assert request is not None
        assert request.method == "POST"
        assert request.url.path == "/2.0/repositories/acme/mobile-app/pullrequests/42/comments"
        assert json.loads(request.content) == {"content": {"raw": "LGTM"}}

    def test_post_without_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"state": "DECLINED"})
        _execute(BitbucketClient(_settings()), "bitbucket.pull-requests.decline", PR)
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path.endswith("/pullrequests/42/decline")
        assert request.content == b""

    def test_text_response(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(text="diff --git a/x b/x\n", headers={"content-type": "text/plain"})
        data = _execute(BitbucketClient(_settings()), "bitbucket.pull-requests.diff", PR)
        assert data == "diff --git a/x b/x\n"

    def test_empty_response(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=204)
        data = _execute(BitbucketClient(_settings()), "bitbucket.pull-requests.unapprove", PR)
        assert data is None
        request = httpx_mock.get_request()
        assert request is not None
        assert request.method == "DELETE"

    def test_http_error_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=404, json={"error": {"message": "not found"}})
        with pytest.raises(httpx.HTTPStatusError):
            _execute(BitbucketClient(_settings()), "bitbucket.pull-requests.get", PR)

    def test_path_values_are_quoted(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={})
        _execute(
            BitbucketClient(_settings()),
            "bitbucket.repositories.webhooks.get",
            {"workspace": "acme", "repo_slug": "mobile-app", "uid": "{abc-123}"},
        )
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.raw_path.decode().endswith("/hooks/%7Babc-123%7D")


class TestDataCenter:
    def test_base_url_and_version_query(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"state": "MERGED"})
        client = BitbucketClient(_settings(platform="datacenter", base_url="https://git.example.com/"))
        assert client.platform == "datacenter"
        _execute(
            client,
            "bitbucket.datacenter.pull-requests.merge",
            {"projectKey": "PRJ", "repositorySlug": "app", "pullRequestId": 5, "version": 2},
        )
        request = httpx_mock.get_request()
        assert request is not None
        assert str(request.url) == (
            "https://git.example.com/rest/api/1.0/projects/PRJ/repos/app/pull-requests/5/merge?version=2"
        )
        assert request.content == b""


class TestQueryParams:
    def test_booleans_lowercased(self) -> None:
        assert _query_params({"active": True, "forkable": False}) == {"active": "true", "forkable": "false"}

    def test_none_dropped(self) -> None:
        assert _query_params({"q": None, "page": 2}) == {"page": "2"}

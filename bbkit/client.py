"""Bitbucket REST client — executes a validated operation contract over HTTP."""

import logging
from typing import Any

import httpx

from bbkit.models import OperationContract
from bbkit.settings import BbkitSettings

logger = logging.getLogger(__name__)


class BitbucketClient:
    def __init__(self, settings: BbkitSettings) -> None:
        self._base_url = settings.api_url
        self._platform = settings.platform
        self._timeout = settings.timeout
        self._headers = {"Accept": "application/json"}
        self._auth: httpx.BasicAuth | None = None
        if settings.token:
            self._headers["Authorization"] = f"Bearer {settings.token.get_secret_value()}"
        elif settings.username and settings.app_password:
            self._auth = httpx.BasicAuth(settings.username, settings.app_password.get_secret_value())
        else:
            raise RuntimeError("No Bitbucket credentials. Run: bbkit init")

    @property
    def platform(self) -> str:
        return self._platform

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: Any = None,
    ) -> Any:
        logger.debug("%s %s", method, path, extra={"params": params})
        response = httpx.request(
            method,
            f"{self._base_url}{path}",
            headers=self._headers,
            auth=self._auth,
            params=_query_params(params or {}),
            json=body,
            timeout=self._timeout,
        )
        if response.status_code == 401:
            raise RuntimeError("Bitbucket API returned 401. Run bbkit init to update credentials for the active profile.")
        response.raise_for_status()
        if not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            return response.json()
        # diff, patch and step logs come back as text/plain
        return response.text

    def execute(self, contract: OperationContract, payload: dict[str, Any]) -> Any:
        """Call the operation with an already validated payload."""
        path_values, query, body = contract.split_payload(payload)
        return self._request(contract.method, contract.render_path(path_values), params=query, body=body)


def _query_params(params: dict[str, Any]) -> dict[str, str]:
    # httpx would send True as "True"; Bitbucket expects lowercase booleans
    result = {}
    for key, value in params.items():
        if value is None:
            continue
        result[key] = str(value).lower() if isinstance(value, bool) else str(value)
    return result

"""TeamCity REST API client."""

import json
import logging

import httpx

from tcprov.client.base import CIClient
from tcprov.errors import NetworkError, ServerError
from tcprov.models import Found, Lookup, NotFound

logger = logging.getLogger(__name__)


class TeamCityClient(CIClient):
    def __init__(
        self,
        server_url: str,
        username: str,
        password: str,
        verify: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = server_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password)
        self._verify = verify
        self._timeout = timeout
        self._headers = {"Accept": "application/json"}

    def _request(
        self,
        method: str,
        path: str,
        body: dict | str | None = None,
        content_type: str = "application/json",
    ) -> httpx.Response:
        headers = dict(self._headers)
        content: bytes | None = None
        if body is not None:
            headers["Content-Type"] = content_type
            content = (json.dumps(body) if isinstance(body, dict) else body).encode()
        try:
            response = httpx.request(
                method,
                f"{self._base_url}{path}",
                auth=self._auth,
                headers=headers,
                content=content,
                timeout=self._timeout,
                verify=self._verify,
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    @staticmethod
    def _check(response: httpx.Response) -> None:
        if response.is_success:
            return
        hint = ""
        if response.status_code == 401:
            hint = "TeamCity rejected the credentials. Check username and password for the active profile."
        raise ServerError(response.status_code, response.text, hint=hint)

    @staticmethod
    def _decode(response: httpx.Response) -> dict | str | None:
        # Some endpoints answer with an empty body or plain text.
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str) -> Lookup:
        response = self._request("GET", path)
        if response.status_code == 404:
            return NotFound(path=path)
        self._check(response)
        return Found(resource=self._decode(response))

    def post(self, path: str, body: dict) -> dict | str | None:
        response = self._request("POST", path, body)
        self._check(response)
        return self._decode(response)

    def put(self, path: str, body: dict | str, content_type: str = "application/json") -> dict | str | None:
        response = self._request("PUT", path, body, content_type=content_type)
        self._check(response)
        return self._decode(response)

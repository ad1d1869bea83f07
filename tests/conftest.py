"""Shared test fixtures and an in-memory CI server fake."""

import copy

import pytest

from tcprov.client.base import CIClient
from tcprov.errors import ServerError
from tcprov.models import Found, Lookup, NotFound, ProvisionConfig, maven_actions

API = "/app/rest"


class FakeClient(CIClient):
    """Records every call and behaves like a small TeamCity server.

    Created top-level resources become visible to later lookups. Build steps
    (by name) and triggers (by type) reject duplicates with HTTP 400, the way
    a server refusing an identical entry would.
    """

    def __init__(self, existing: dict[str, dict] | None = None, failures: dict | None = None) -> None:
        self.resources: dict[str, dict] = dict(existing or {})
        self.children: dict[str, list] = {}
        self.settings: dict[str, str] = {}
        self.failures: dict[tuple[str, str], Exception] = failures or {}
        self.calls: list[tuple[str, str, object]] = []

    def _record(self, method: str, path: str, body: object = None) -> None:
        self.calls.append((method, path, body))
        exc = self.failures.get((method, path))
        if exc is not None:
            raise exc

    def get(self, path: str) -> Lookup:
        self._record("GET", path)
        if path in self.resources:
            return Found(resource=self.resources[path])
        return NotFound(path=path)

    def post(self, path: str, body: dict) -> dict | str | None:
        self._record("POST", path, body)
        if path.endswith(("/steps", "/triggers", "/vcs-root-entries")):
            key = {"steps": "name", "triggers": "type"}.get(path.rsplit("/", 1)[1])
            entries = self.children.setdefault(path, [])
            if key and any(entry[key] == body[key] for entry in entries):
                raise ServerError(400, f"Duplicate entry: {body[key]}")
            entries.append(body)
            return body
        if path.endswith("/buildTypes"):
            lookup = f"{API}/buildTypes/id:{body['id']}"
        else:
            lookup = f"{path}/id:{body['id']}"
        self.resources[lookup] = dict(body)
        return dict(body)

    def put(self, path: str, body: dict | str, content_type: str = "application/json") -> dict | str | None:
        self._record("PUT", path, body)
        self.settings[path] = body  # type: ignore[assignment]
        return body

    def methods_and_paths(self) -> list[tuple[str, str]]:
        return [(method, path) for method, path, _ in self.calls]

    def snapshot(self) -> tuple:
        return copy.deepcopy((self.resources, self.children, self.settings))


@pytest.fixture
def provision_config() -> ProvisionConfig:
    return ProvisionConfig(
        server_url="http://tc.local:8111/",
        username="builder",
        password="s3cret",
        project_id="App",
        project_name="App Platform",
        project_description="Application build pipeline",
        build_type_id="App_Build",
        build_type_name="Build",
        vcs_root_name="App Repository",
        git_url="https://github.com/acme/app.git",
        git_branch="refs/heads/main",
        build_actions=maven_actions("app/pom.xml"),
        artifact_rules="app/target/app-*.jar => app.jar",
        quiet_period=60,
    )


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()

"""Idempotent create-if-missing provisioning of a TeamCity build configuration."""

import logging
from collections.abc import Callable
from typing import NamedTuple

from rich.console import Console
from rich.markup import escape

from tcprov import resources
from tcprov.client.base import CIClient
from tcprov.errors import CIError, FatalStepError, NonFatalStepError
from tcprov.models import Found, ProvisionConfig, ProvisionReport, ResourceSpec, StepResult

logger = logging.getLogger(__name__)


def ensure_resource(client: CIClient, spec: ResourceSpec, step: str = "") -> StepResult:
    """Make sure the resource described by spec exists on the server.

    An existing resource is returned untouched: no diffing, no update, and
    its attachments are not re-posted. A missing one is created, followed by
    its attachments in order. Specs without a lookup path are always issued.
    Client errors propagate to the caller.
    """
    if spec.lookup_path is not None:
        lookup = client.get(spec.lookup_path)
        if isinstance(lookup, Found):
            return StepResult(
                step=step,
                name=spec.name,
                status="existed",
                resource=lookup.resource,
                resource_id=_resource_id(lookup.resource, spec),
            )
        logger.debug("%s not found at %s", spec.name, spec.lookup_path)

    if spec.method == "put":
        created = client.put(spec.create_path, spec.payload, content_type=spec.content_type)
    else:
        created = client.post(spec.create_path, spec.payload)  # type: ignore[arg-type]

    for attachment in spec.attachments:
        client.post(attachment.path, attachment.payload)

    return StepResult(
        step=step,
        name=spec.name,
        status="created",
        resource=created,
        resource_id=_resource_id(created, spec),
    )


def _resource_id(resource: dict | str | None, spec: ResourceSpec) -> str | None:
    if isinstance(resource, dict) and resource.get("id"):
        return str(resource["id"])
    return spec.resource_id


class _State:
    """Identifiers threaded forward from earlier steps."""

    def __init__(self) -> None:
        self.vcs_root_id: str | None = None
        self.build_type_id: str | None = None


class _Step(NamedTuple):
    title: str
    build: Callable[[], list[ResourceSpec]]
    yields: str | None = None  # _State attribute filled from this step's result


def _pipeline(config: ProvisionConfig, state: _State) -> list[_Step]:
    return [
        _Step("Ensuring project", lambda: [resources.project_spec(config)]),
        _Step("Ensuring VCS root", lambda: [resources.vcs_root_spec(config)], yields="vcs_root_id"),
        _Step(
            "Ensuring build configuration",
            lambda: [resources.build_type_spec(config, state.vcs_root_id)],  # type: ignore[arg-type]
            yields="build_type_id",
        ),
        _Step("Adding build steps", lambda: resources.build_action_specs(config, state.build_type_id)),  # type: ignore[arg-type]
        _Step("Setting artifact rules", lambda: [resources.artifact_rules_spec(config, state.build_type_id)]),  # type: ignore[arg-type]
        _Step("Adding VCS trigger", lambda: [resources.vcs_trigger_spec(config, state.build_type_id)]),  # type: ignore[arg-type]
        _Step("Adding scheduled trigger", lambda: [resources.schedule_trigger_spec(config, state.build_type_id)]),  # type: ignore[arg-type]
    ]


def plan(config: ProvisionConfig) -> list[tuple[str, ResourceSpec]]:
    """Every request a run on an empty server would issue, using config-derived ids."""
    state = _State()
    state.vcs_root_id = config.vcs_root_id
    state.build_type_id = config.build_type_id
    return [(step.title, spec) for step in _pipeline(config, state) for spec in step.build()]


class Provisioner:
    def __init__(self, config: ProvisionConfig, client: CIClient, console: Console | None = None) -> None:
        self._config = config
        self._client = client
        self._console = console or Console()

    def plan(self) -> list[tuple[str, ResourceSpec]]:
        return plan(self._config)

    def run(self) -> ProvisionReport:
        """Run all steps in order.

        Raises FatalStepError when a critical resource fails; nothing after it
        is attempted. Best-effort failures are reported as warnings.
        """
        report = ProvisionReport()
        state = _State()
        pipeline = _pipeline(self._config, state)

        for index, step in enumerate(pipeline, start=1):
            self._console.print(f"\n[bold]{escape(f'[{index}/{len(pipeline)}]')}[/bold] {step.title}...")
            for spec in step.build():
                result = self._apply(step.title, spec)
                report.results.append(result)
                self._print_result(spec, result)
                if step.yields:
                    setattr(state, step.yields, result.resource_id)

        return report

    def _apply(self, title: str, spec: ResourceSpec) -> StepResult:
        try:
            return ensure_resource(self._client, spec, step=title)
        except CIError as exc:
            if spec.critical:
                raise FatalStepError(title, spec.name, exc) from exc
            warning = NonFatalStepError(title, spec.name, exc)
            logger.debug("Skipping %s", spec.name, exc_info=exc)
            return StepResult(step=title, name=spec.name, status="failed", error=str(warning))

    def _print_result(self, spec: ResourceSpec, result: StepResult) -> None:
        name = escape(spec.name)
        if result.status == "existed":
            self._console.print(f"[green]✓[/green] {name} already exists")
        elif result.status == "created":
            self._console.print(f"[green]✓[/green] {'Created' if spec.lookup_path else 'Applied'} {name}")
            for attachment in spec.attachments:
                self._console.print(f"[green]✓[/green] Attached {escape(attachment.name)}")
        else:
            self._console.print(f"[yellow]⚠[/yellow] {escape(result.error or name)}")

"""Resource definitions for each provisioning step, in TeamCity's REST payload shapes."""

from tcprov.models import Attachment, BuildAction, ProvisionConfig, ResourceSpec

API = "/app/rest"


def _properties(values: dict[str, str]) -> dict:
    return {"property": [{"name": k, "value": v} for k, v in values.items()]}


def _build_type_path(build_type_id: str) -> str:
    return f"{API}/buildTypes/id:{build_type_id}"


def project_spec(config: ProvisionConfig) -> ResourceSpec:
    return ResourceSpec(
        name=f"project {config.project_id}",
        resource_id=config.project_id,
        lookup_path=f"{API}/projects/id:{config.project_id}",
        create_path=f"{API}/projects",
        payload={
            "id": config.project_id,
            "name": config.project_name,
            "description": config.project_description,
        },
        critical=True,
    )


def vcs_root_spec(config: ProvisionConfig) -> ResourceSpec:
    vcs_root_id = config.vcs_root_id
    return ResourceSpec(
        name=f"VCS root {vcs_root_id}",
        resource_id=vcs_root_id,
        lookup_path=f"{API}/vcs-roots/id:{vcs_root_id}",
        create_path=f"{API}/vcs-roots",
        payload={
            "id": vcs_root_id,
            "name": config.vcs_root_name,
            "project": {"id": config.project_id},
            "vcsName": "jetbrains.git",
            "properties": _properties(
                {
                    "url": config.git_url,
                    "branch": config.git_branch,
                    "authMethod": "ANONYMOUS",
                    "usernameStyle": "USERID",
                }
            ),
        },
        critical=True,
    )


def build_type_spec(config: ProvisionConfig, vcs_root_id: str) -> ResourceSpec:
    """Build type plus the VCS root entry attached once it is created.

    The build type is created with a minimal payload and the VCS root entry
    is posted separately, only when the build type did not exist before.
    """
    if not vcs_root_id:
        raise ValueError("VCS root id is required to attach it to the build type")
    path = _build_type_path(config.build_type_id)
    return ResourceSpec(
        name=f"build type {config.build_type_id}",
        resource_id=config.build_type_id,
        lookup_path=path,
        create_path=f"{API}/projects/id:{config.project_id}/buildTypes",
        payload={"id": config.build_type_id, "name": config.build_type_name},
        attachments=[
            Attachment(
                name=f"VCS root {vcs_root_id} attachment",
                path=f"{path}/vcs-root-entries",
                payload={"vcs-root": {"id": vcs_root_id}, "checkout-rules": ""},
            )
        ],
        critical=True,
    )


def build_action_spec(build_type_id: str, action: BuildAction) -> ResourceSpec:
    return ResourceSpec(
        name=f"build step '{action.name}'",
        create_path=f"{_build_type_path(build_type_id)}/steps",
        payload={"name": action.name, "type": action.runner_type, "properties": _properties(action.properties)},
    )


def build_action_specs(config: ProvisionConfig, build_type_id: str) -> list[ResourceSpec]:
    return [build_action_spec(build_type_id, action) for action in config.build_actions]


def artifact_rules_spec(config: ProvisionConfig, build_type_id: str) -> ResourceSpec:
    # Plain overwrite on every run; the current value is never read back.
    return ResourceSpec(
        name="artifact rules",
        create_path=f"{_build_type_path(build_type_id)}/settings/artifactRules",
        payload=config.artifact_rules,
        method="put",
        content_type="text/plain",
    )


def vcs_trigger_spec(config: ProvisionConfig, build_type_id: str) -> ResourceSpec:
    return ResourceSpec(
        name=f"VCS trigger ({config.quiet_period}s quiet period)",
        create_path=f"{_build_type_path(build_type_id)}/triggers",
        payload={
            "type": "vcsTrigger",
            "properties": _properties(
                {
                    "quietPeriodMode": "USE_CUSTOM",
                    "quietPeriod": str(config.quiet_period),
                    "triggerRules": "",
                }
            ),
        },
    )


def schedule_trigger_spec(config: ProvisionConfig, build_type_id: str) -> ResourceSpec:
    schedule = config.schedule
    return ResourceSpec(
        name=f"scheduled trigger ({schedule.describe()})",
        create_path=f"{_build_type_path(build_type_id)}/triggers",
        payload={
            "type": "schedulingTrigger",
            "properties": _properties(
                {
                    "schedulingPolicy": "cron",
                    "cronExpression_sec": schedule.seconds,
                    "cronExpression_min": schedule.minutes,
                    "cronExpression_hour": schedule.hours,
                    "cronExpression_dm": schedule.day_of_month,
                    "cronExpression_month": schedule.month,
                    "cronExpression_dw": schedule.day_of_week,
                    "cronExpression_year": schedule.year,
                    "triggerBuildWithPendingChangesOnly": "false",
                }
            ),
        },
    )

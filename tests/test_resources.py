"""Tests for tcprov.resources payload shapes."""

import pytest

from tcprov import resources
from tcprov.models import BuildAction, ProvisionConfig


def _props(payload: dict) -> dict[str, str]:
    return {p["name"]: p["value"] for p in payload["properties"]["property"]}


def test_project_spec(provision_config: ProvisionConfig) -> None:
    spec = resources.project_spec(provision_config)
    assert spec.critical
    assert spec.lookup_path == "/app/rest/projects/id:App"
    assert spec.create_path == "/app/rest/projects"
    assert spec.payload == {"id": "App", "name": "App Platform", "description": "Application build pipeline"}


def test_vcs_root_spec(provision_config: ProvisionConfig) -> None:
    spec = resources.vcs_root_spec(provision_config)
    assert spec.critical
    assert spec.resource_id == "App_GitRoot"
    assert spec.payload["project"] == {"id": "App"}  # type: ignore[index]
    assert spec.payload["vcsName"] == "jetbrains.git"  # type: ignore[index]
    assert _props(spec.payload) == {  # type: ignore[arg-type]
        "url": "https://github.com/acme/app.git",
        "branch": "refs/heads/main",
        "authMethod": "ANONYMOUS",
        "usernameStyle": "USERID",
    }


def test_build_type_spec_attaches_vcs_root(provision_config: ProvisionConfig) -> None:
    spec = resources.build_type_spec(provision_config, "App_GitRoot")
    assert spec.critical
    assert spec.create_path == "/app/rest/projects/id:App/buildTypes"
    assert spec.payload == {"id": "App_Build", "name": "Build"}
    assert len(spec.attachments) == 1
    attachment = spec.attachments[0]
    assert attachment.path == "/app/rest/buildTypes/id:App_Build/vcs-root-entries"
    assert attachment.payload == {"vcs-root": {"id": "App_GitRoot"}, "checkout-rules": ""}


@pytest.mark.parametrize("vcs_root_id", ["", None])
def test_build_type_spec_requires_vcs_root_id(provision_config: ProvisionConfig, vcs_root_id) -> None:
    with pytest.raises(ValueError, match="VCS root id"):
        resources.build_type_spec(provision_config, vcs_root_id)


def test_build_action_spec() -> None:
    action = BuildAction(
        name="Gradle Build",
        runner_type="gradle-runner",
        properties={"ui.gradleRunner.gradle.tasks.names": "build"},
    )
    spec = resources.build_action_spec("App_Build", action)
    assert not spec.critical
    assert spec.lookup_path is None
    assert spec.create_path == "/app/rest/buildTypes/id:App_Build/steps"
    assert spec.payload["type"] == "gradle-runner"  # type: ignore[index]
    assert _props(spec.payload) == {"ui.gradleRunner.gradle.tasks.names": "build"}  # type: ignore[arg-type]


def test_maven_package_skips_tests(provision_config: ProvisionConfig) -> None:
    specs = resources.build_action_specs(provision_config, "App_Build")
    assert len(specs) == 3
    package = _props(specs[2].payload)  # type: ignore[arg-type]
    assert package["goals"] == "package"
    assert package["runnerArgs"] == "-DskipTests"
    assert package["pomLocation"] == "app/pom.xml"


def test_artifact_rules_spec_is_plain_text(provision_config: ProvisionConfig) -> None:
    spec = resources.artifact_rules_spec(provision_config, "App_Build")
    assert spec.method == "put"
    assert spec.content_type == "text/plain"
    assert spec.lookup_path is None
    assert spec.payload == "app/target/app-*.jar => app.jar"
    assert spec.create_path == "/app/rest/buildTypes/id:App_Build/settings/artifactRules"


def test_vcs_trigger_quiet_period(provision_config: ProvisionConfig) -> None:
    config = provision_config.model_copy(update={"quiet_period": 120})
    spec = resources.vcs_trigger_spec(config, "App_Build")
    assert spec.payload["type"] == "vcsTrigger"  # type: ignore[index]
    props = _props(spec.payload)  # type: ignore[arg-type]
    assert props["quietPeriod"] == "120"
    assert props["quietPeriodMode"] == "USE_CUSTOM"


def test_schedule_trigger_defaults_to_daily_2am(provision_config: ProvisionConfig) -> None:
    spec = resources.schedule_trigger_spec(provision_config, "App_Build")
    assert spec.payload["type"] == "schedulingTrigger"  # type: ignore[index]
    props = _props(spec.payload)  # type: ignore[arg-type]
    assert props["cronExpression_sec"] == "0"
    assert props["cronExpression_min"] == "0"
    assert props["cronExpression_hour"] == "2"
    assert props["cronExpression_dw"] == "?"
    assert props["triggerBuildWithPendingChangesOnly"] == "false"

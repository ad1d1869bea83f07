"""Shared pydantic models: the contract between resources, client and provisioner."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class BuildAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    runner_type: str = "Maven2"
    properties: dict[str, str] = {}


class CronSchedule(BaseModel):
    """Quartz-style schedule as TeamCity's schedulingTrigger expects it."""

    model_config = ConfigDict(frozen=True)

    seconds: str = "0"
    minutes: str = "0"
    hours: str = "2"
    day_of_month: str = "*"
    month: str = "*"
    day_of_week: str = "?"
    year: str = "*"

    def describe(self) -> str:
        return " ".join(
            [self.seconds, self.minutes, self.hours, self.day_of_month, self.month, self.day_of_week, self.year]
        )


def parse_cron(expr: str) -> CronSchedule:
    """Parse "sec min hour day-of-month month day-of-week [year]" into a CronSchedule."""
    fields = expr.split()
    if len(fields) not in (6, 7):
        raise ValueError(f"Cron expression needs 6 or 7 fields, got {len(fields)}: {expr!r}")
    names = ["seconds", "minutes", "hours", "day_of_month", "month", "day_of_week", "year"]
    return CronSchedule(**dict(zip(names, fields)))


def maven_actions(pom_location: str) -> list[BuildAction]:
    """Default clean/compile/package sequence for a Maven project."""
    base = {"pomLocation": pom_location, "mavenVersion": "DEFAULT"}
    return [
        BuildAction(name="Maven Clean", properties={"goals": "clean", **base}),
        BuildAction(name="Maven Compile", properties={"goals": "compile", **base}),
        BuildAction(name="Maven Package", properties={"goals": "package", **base, "runnerArgs": "-DskipTests"}),
    ]


class ProvisionConfig(BaseModel):
    """Everything one provisioning run needs. Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    server_url: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: SecretStr
    project_id: str = Field(min_length=1)
    project_name: str = Field(min_length=1)
    project_description: str = ""
    build_type_id: str = Field(min_length=1)
    build_type_name: str = Field(min_length=1)
    vcs_root_name: str = Field(min_length=1)
    git_url: str = Field(min_length=1)
    git_branch: str = Field(min_length=1)
    build_actions: list[BuildAction] = []
    artifact_rules: str = ""
    quiet_period: int = Field(default=60, ge=0)
    schedule: CronSchedule = CronSchedule()

    @field_validator("server_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> object:
        return value.rstrip("/") if isinstance(value, str) else value

    @property
    def vcs_root_id(self) -> str:
        return f"{self.project_id}_GitRoot"

    @property
    def build_configuration_url(self) -> str:
        return f"{self.server_url}/buildConfiguration/{self.build_type_id}"


class Attachment(BaseModel):
    """Sub-resource posted right after its parent is freshly created."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    payload: dict


class ResourceSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    resource_id: str | None = None
    lookup_path: str | None = None  # None: never looked up, always issued
    create_path: str
    payload: dict | str
    method: Literal["post", "put"] = "post"
    content_type: str = "application/json"
    attachments: list[Attachment] = []
    critical: bool = False


class Found(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource: dict | str | None


class NotFound(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str


Lookup = Found | NotFound


class StepResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: str
    name: str
    status: Literal["existed", "created", "failed"]
    resource: dict | str | None = None
    resource_id: str | None = None
    error: str | None = None


class ProvisionReport(BaseModel):
    results: list[StepResult] = []

    @property
    def ok(self) -> bool:
        return not self.warnings

    @property
    def warnings(self) -> list[StepResult]:
        return [r for r in self.results if r.status == "failed"]

    def status_of(self, name: str) -> str | None:
        for result in self.results:
            if result.name == name:
                return result.status
        return None

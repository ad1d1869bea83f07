"""tcprov CLI: all commands."""

from typing import Annotated

import tomlkit
import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tcprov.client.base import CIClient
from tcprov.client.teamcity import TeamCityClient
from tcprov.errors import FatalStepError
from tcprov.logging_config import configure_logging
from tcprov.models import ProvisionConfig, ProvisionReport
from tcprov.provisioner import Provisioner
from tcprov.provisioner import plan as plan_requests
from tcprov.settings import (
    CONFIG_PATH,
    PLACEHOLDER_GIT_URL,
    TcprovSettings,
    _list_profiles,
    _load_toml,
    build_config,
    get_settings,
)

app = typer.Typer(help="tcprov: provision a TeamCity build configuration over the REST API", no_args_is_help=True)

console = Console()

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/tcprov/config.toml"),
]


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


def get_client(config: ProvisionConfig, settings: TcprovSettings) -> CIClient:
    return TeamCityClient(
        config.server_url,
        config.username,
        config.password.get_secret_value(),
        verify=settings.verify_tls,
        timeout=settings.timeout,
    )


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_header(config: ProvisionConfig) -> None:
    rprint("[bold]TeamCity Build Configuration Setup[/bold]")
    rprint(f"Target:  {config.server_url}")
    rprint(f"Project: {escape(config.project_name)}")
    rprint(f"Build:   {escape(config.build_type_name)}")

    if config.git_url == PLACEHOLDER_GIT_URL:
        rprint("")
        rprint("[yellow]Warning:[/yellow] git URL is not configured.")
        rprint("  Set git_url in your profile or TCPROV_GIT_URL. Continuing with the placeholder URL...")


def _print_summary(config: ProvisionConfig, report: ProvisionReport) -> None:
    rprint("")
    if report.ok:
        rprint("[green]✓ Setup complete![/green]")
    else:
        rprint(f"[yellow]✓ Setup complete with {len(report.warnings)} warning(s):[/yellow]")
        for result in report.warnings:
            rprint(f"  [yellow]⚠[/yellow] {escape(result.name)}")

    rprint("")
    rprint("Build configuration URL:")
    rprint(config.build_configuration_url)
    rprint("")
    rprint("Next steps:")
    rprint("  1. Run a manual build from the build configuration page to verify it")
    rprint("  2. Check that the VCS root can reach the repository")
    rprint("  3. Download the published artifacts from the finished build")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("provision")
def provision(
    profile: ProfileOpt = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every HTTP call")] = False,
) -> None:
    """Create the project, VCS root, build configuration, steps, artifacts and triggers."""
    configure_logging(verbose)
    settings = get_settings(profile=profile)
    config = build_config(settings)
    _print_header(config)

    provisioner = Provisioner(config, get_client(config, settings), console=console)
    try:
        report = provisioner.run()
    except FatalStepError as exc:
        rprint("")
        rprint(f"[red]✗ Setup failed:[/red] {escape(str(exc))}")
        rprint("Check the TeamCity credentials and network connection for the active profile.")
        raise typer.Exit(1) from exc

    _print_summary(config, report)


@app.command("plan")
def plan(profile: ProfileOpt = None) -> None:
    """Show the ordered requests a run would issue, without contacting the server."""
    config = build_config(get_settings(profile=profile))

    table = Table(title=f"Provisioning plan for {config.build_type_id}")
    table.add_column("Step", style="bold")
    table.add_column("Resource")
    table.add_column("Lookup", style="dim")
    table.add_column("Request", style="cyan")
    table.add_column("On failure")

    for title, spec in plan_requests(config):
        table.add_row(
            title,
            escape(spec.name),
            spec.lookup_path or "—",
            f"{spec.method.upper()} {spec.create_path}",
            "abort" if spec.critical else "warn",
        )
        for attachment in spec.attachments:
            table.add_row("", escape(attachment.name), "", f"POST {attachment.path}", "abort")

    rprint(table)


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        return "***"

    def show(val: object) -> str:
        return "[dim](not set)[/dim]" if val in (None, "") else escape(str(val))

    table = Table(title="tcprov Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", show(settings.default_profile))
    table.add_row("server_url", show(settings.server_url))
    table.add_row("username", show(settings.username))
    table.add_row("password", mask(settings.password.get_secret_value() if settings.password else None))
    table.add_row("verify_tls", str(settings.verify_tls))
    table.add_row("timeout", str(settings.timeout))
    table.add_row("project_id", show(settings.project_id))
    table.add_row("project_name", show(settings.project_name))
    table.add_row("build_type_id", show(settings.build_type_id))
    table.add_row("build_type_name", show(settings.build_type_name))
    table.add_row("vcs_root_name", show(settings.vcs_root_name))
    table.add_row("git_url", show(settings.git_url))
    table.add_row("git_branch", show(settings.git_branch))
    table.add_row("pom_location", show(settings.pom_location))
    table.add_row("artifact_rules", show(settings.artifact_rules))
    table.add_row("quiet_period", str(settings.quiet_period))
    table.add_row("schedule", show(settings.schedule))

    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/tcprov/config.toml."""
    if not CONFIG_PATH.exists():
        rprint(f"[red]No config file at {CONFIG_PATH}. Run 'tcprov init' first.[/red]")
        raise typer.Exit(1)

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("init")
def init_cmd() -> None:
    """Interactive first-time setup wizard."""
    rprint("[bold]tcprov Setup Wizard[/bold]")
    rprint("")

    profile_name = typer.prompt("Profile name (e.g. prod, staging)").strip()
    if not profile_name:
        rprint("[red]Profile name cannot be empty.[/red]")
        raise typer.Exit(1)

    server_url = typer.prompt("TeamCity server URL (e.g. https://teamcity.example.com)").strip().rstrip("/")
    if not server_url.startswith(("http://", "https://")):
        rprint("[red]Server URL must start with http:// or https://[/red]")
        raise typer.Exit(1)

    profile_config: dict = {"server_url": server_url}
    profile_config["username"] = typer.prompt("Username").strip()
    profile_config["password"] = typer.prompt("Password", hide_input=True)

    project_id = typer.prompt("Project ID").strip()
    profile_config["project_id"] = project_id
    profile_config["project_name"] = typer.prompt("Project name", default=project_id).strip()
    profile_config["build_type_id"] = typer.prompt("Build configuration ID", default=f"{project_id}_Build").strip()
    profile_config["build_type_name"] = typer.prompt("Build configuration name", default="Build").strip()
    profile_config["vcs_root_name"] = typer.prompt(
        "VCS root name", default=f"{profile_config['project_name']} Repository"
    ).strip()
    profile_config["git_url"] = typer.prompt("Git repository URL", default=PLACEHOLDER_GIT_URL).strip()
    profile_config["git_branch"] = typer.prompt("Branch", default="refs/heads/main").strip()

    set_as_default = typer.confirm(f"Set '{profile_name}' as default profile?", default=True)

    # Round-trip preserves any existing comments
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.load(CONFIG_PATH.open()) if CONFIG_PATH.exists() else tomlkit.document()

    doc[profile_name] = profile_config
    if set_as_default:
        doc["default_profile"] = profile_name

    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f"[green]✓[/green] Profile '{profile_name}' written to {CONFIG_PATH}")

    _load_toml.cache_clear()
    rprint("")
    config_show(profile=profile_name)

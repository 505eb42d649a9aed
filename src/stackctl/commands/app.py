"""Command group: application packaging and inspection."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import click

from stackctl.commands._base import StackctlGroup
from stackctl.commands._prompts import require_interactive, select_app, select_env, select_project
from stackctl.services.app import AppService
from stackctl.services.package import PackageService
from stackctl.services.project import ProjectService

if TYPE_CHECKING:
    from stackctl.commands._context import AppContext

logger = logging.getLogger(__name__)

_APP_EXAMPLES = """\
  stackctl app package -n frontend -e test --tag v1.2.0
  stackctl app package -n frontend -e test --output-dir ./infrastructure
  stackctl app show -a frontend --resources"""


@click.group("app", cls=StackctlGroup, examples=_APP_EXAMPLES)
@click.pass_obj
def app_group(app: AppContext) -> None:
    """Package and inspect applications."""


def _git_describe(work_dir: Path) -> str | None:
    """Short commit-ish for the working tree, or None outside a git repo."""
    try:
        proc = subprocess.run(
            ["git", "describe", "--always"],
            cwd=work_dir,
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        logger.debug("git describe failed in %s", work_dir, exc_info=True)
        return None
    return proc.stdout.strip() or None


@app_group.command(
    "package",
    examples="""\
  stackctl app package -n frontend -e test
  stackctl app package -n frontend -e test --tag v1.2.0 > frontend.stack.yml
  stackctl app package -n frontend -e test --output-dir ./infrastructure""",
)
@click.option("-n", "--name", "app_name", default=None, help="Name of the application.")
@click.option("-e", "--env", "env_name", default=None, help="Name of the environment.")
@click.option("--tag", default=None, help="The container image tag.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write the stack and parameter files to this directory instead of stdout.",
)
@click.pass_obj
def package(
    app: AppContext,
    app_name: str | None,
    env_name: str | None,
    tag: str | None,
    output_dir: Path | None,
) -> None:
    """Print the CloudFormation template of an application for an environment.

    With --output-dir the template, its parameters and any addons template
    are written as files and nothing is printed unless --json is given;
    --quiet lists the created paths.
    """
    project_name = app.project_name()
    if app_name is None:
        app_name = select_app(
            app,
            project_name,
            prompt="Which application would you like to generate a CloudFormation template for?",
            local_only=True,
        )
    if env_name is None:
        env_name = select_env(
            app, project_name, prompt="Which environment would you like to create this stack for?"
        )

    svc = PackageService(app.backend)
    validated = svc.validate(project_name, app_name, env_name)
    if not validated.ok:
        app.emit(validated)

    if tag is None:
        tag = _git_describe(app.settings.work_dir)
    if tag is None:
        require_interactive(app, "--tag")
        tag = click.prompt("What's the image tag?")

    if output_dir is None and app.settings.package.output_dir:
        output_dir = Path(app.settings.package.output_dir)

    result = svc.package_app(project_name, app_name, env_name, tag, output_dir=output_dir)
    # The template itself is the stdout payload in stream mode.
    listing = app.settings.json_output or app.settings.quiet
    if not result.ok or (output_dir is not None and listing):
        app.emit(result)


@app_group.command(
    "show",
    examples="""\
  stackctl app show -a frontend
  stackctl app show -a frontend -p test --resources
  stackctl --json app show -a frontend""",
)
@click.option("-a", "--app", "app_name", default=None, help="Name of the application.")
@click.option("-p", "--project", "project_name", default=None, help="Name of the project.")
@click.option("--resources", is_flag=True, help="Also list the CloudFormation resources.")
@click.pass_obj
def show(app: AppContext, app_name: str | None, project_name: str | None, resources: bool) -> None:
    """Show configuration, routes and resources of a deployed application."""
    if project_name is None:
        project_name = ProjectService(app.backend).workspace_project()
    if project_name is None:
        project_name = select_project(app)
    if app_name is None:
        app_name = select_app(app, project_name, flag="--app")
    app.emit(AppService(app.backend).show_app(project_name, app_name, with_resources=resources))

"""Command group: project bootstrap and inspection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from stackctl.commands._base import StackctlGroup
from stackctl.commands._prompts import ask_new_project_name, select_project
from stackctl.domain.errors import InvalidNameError
from stackctl.domain.names import validate_name
from stackctl.services.project import ProjectService
from stackctl.services.result import ServiceResult

if TYPE_CHECKING:
    from stackctl.commands._context import AppContext

_PROJECT_EXAMPLES = """\
  stackctl project init test
  stackctl project init test --domain example.com
  stackctl project show
  stackctl --json project show -p test"""


@click.group(cls=StackctlGroup, examples=_PROJECT_EXAMPLES)
@click.pass_obj
def project(app: AppContext) -> None:
    """Create and inspect projects."""


@project.command(
    "init",
    examples="""\
  stackctl project init test
  stackctl project init test --domain example.com
  stackctl --no-interact --json project init test""",
)
@click.argument("name", required=False)
@click.option("--domain", default="", help="Domain name for HTTPS load balancers.")
@click.pass_obj
def init(app: AppContext, name: str | None, domain: str) -> None:
    """Create a new empty project.

    A project is a collection of containerized applications that share
    a VPC, a cluster and service discovery.
    """
    if name:
        try:
            validate_name(name, kind="project")
        except InvalidNameError as exc:
            app.emit(ServiceResult.failure("init_project", exc))

    svc = ProjectService(app.backend)
    registered = svc.workspace_project()
    if registered is not None:
        if name and name != registered:
            app.info(
                f"Looks like you are using a workspace that's registered to project {registered}.\n"
                f"We'll use that as your project instead of {name}."
            )
        else:
            app.info(
                f"Looks like you are using a workspace that's registered to project {registered}.\n"
                "We'll use that as your project."
            )
        name = registered
    elif not name:
        name = _ask_project_name(app, svc)

    app.emit(svc.init_project(name, domain=domain, progress=app.progress()))


def _ask_project_name(app: AppContext, svc: ProjectService) -> str:
    if not app.interactive:
        raise click.UsageError("Missing argument 'NAME' (prompts are disabled by --no-interact).")

    listed = svc.list_projects()
    existing = listed.data.get("projects", []) if listed.ok else []
    if not existing:
        app.info("Looks like you don't have any existing projects. Let's create one!")
        return ask_new_project_name()

    app.info("Looks like you have some projects already.")
    if click.confirm("Would you like to use one of your existing projects?", default=True):
        return select_project(app, prompt="Which existing project do you want to use?")
    app.info("Ok, let's create a new project then.")
    return ask_new_project_name()


@project.command(
    "show",
    examples="""\
  stackctl project show
  stackctl project show -p test
  stackctl --json project show""",
)
@click.option("-p", "--project", "project_name", default=None, help="Name of the project.")
@click.pass_obj
def show(app: AppContext, project_name: str | None) -> None:
    """Show a project's environments and applications."""
    if project_name is None:
        project_name = ProjectService(app.backend).workspace_project() or select_project(app)
    app.emit(ProjectService(app.backend).show_project(project_name))

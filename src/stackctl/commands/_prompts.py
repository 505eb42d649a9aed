"""Interactive selection of projects, environments and applications.

Every helper turns into a usage error under ``--no-interact`` so scripted
runs fail fast with the flag they should have passed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from stackctl.domain.errors import InvalidNameError
from stackctl.domain.names import validate_name
from stackctl.services.project import ProjectService

if TYPE_CHECKING:
    from stackctl.commands._context import AppContext
    from stackctl.services.result import ServiceResult


def require_interactive(app: AppContext, flag: str) -> None:
    if not app.interactive:
        raise click.UsageError(f"Missing option '{flag}' (prompts are disabled by --no-interact).")


def select_one(app: AppContext, names: list[str], *, kind: str, prompt: str) -> str:
    """Pick one of *names*; a single candidate is taken without asking."""
    if not names:
        raise click.ClickException(f"no {kind}s found")
    if len(names) == 1:
        app.info(f"Only found one {kind}, defaulting to: {names[0]}")
        return names[0]
    return click.prompt(prompt, type=click.Choice(names))


def _names(app: AppContext, result: ServiceResult, key: str) -> list[str]:
    if not result.ok:
        app.emit(result)
    return list(result.data[key])


def select_project(app: AppContext, *, prompt: str = "Which project?") -> str:
    require_interactive(app, "--project")
    names = _names(app, ProjectService(app.backend).list_projects(), "projects")
    return select_one(app, names, kind="project", prompt=prompt)


def select_env(app: AppContext, project: str, *, prompt: str = "Which environment?") -> str:
    require_interactive(app, "--env")
    names = _names(app, ProjectService(app.backend).list_environments(project), "environments")
    if not names:
        app.info(
            f"Couldn't find any environments associated with project {project}, "
            "try initializing one first."
        )
        raise click.ClickException(f"no environments found in project {project}")
    return select_one(app, names, kind="environment", prompt=prompt)


def select_app(
    app: AppContext,
    project: str,
    *,
    prompt: str = "Which application?",
    flag: str = "--name",
    local_only: bool = False,
) -> str:
    require_interactive(app, flag)
    names = _names(
        app,
        ProjectService(app.backend).list_applications(project, local_only=local_only),
        "applications",
    )
    return select_one(app, names, kind="application", prompt=prompt)


def _project_name_proc(value: str) -> str:
    try:
        return validate_name(value.strip(), kind="project")
    except InvalidNameError as exc:
        raise click.BadParameter(exc.message) from exc


def ask_new_project_name() -> str:
    return click.prompt("What would you like to name your project?", value_proc=_project_name_proc)

"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy backend construction and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from stackctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from stackctl.config.settings import StackctlSettings
    from stackctl.infrastructure.backend import Backend
    from stackctl.services.contracts import Progress
    from stackctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The backend is built on first use so ``--help`` and ``--version``
    never create AWS sessions.
    """

    def __init__(self, settings: StackctlSettings) -> None:
        self.settings = settings
        self._backend: Backend | None = None

        from stackctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from stackctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def backend(self) -> Backend:
        """The collaborator bundle (created lazily on first access)."""
        if self._backend is None:
            from stackctl.infrastructure.backend import Backend

            self._backend = Backend.from_settings(self.settings)
        return self._backend

    @property
    def interactive(self) -> bool:
        return not self.settings.no_interact

    def info(self, message: str) -> None:
        """Human-facing notice on stderr; suppressed by ``--quiet`` and ``--json``."""
        if not (self.settings.quiet or self.settings.json_output):
            click.echo(message, err=True)

    def progress(self) -> Progress:
        from stackctl.output.progress import NullProgress, SpinnerProgress

        if self.settings.quiet or self.settings.json_output:
            return NullProgress()
        return SpinnerProgress()

    def project_name(self) -> str:
        """Project the current workspace is bound to.

        Raises:
            click.ClickException: the workspace has not been initialized.
        """
        from stackctl.services.project import ProjectService

        name = ProjectService(self.backend).workspace_project()
        if name is None:
            raise click.ClickException(
                "could not find a project associated with the workspace; "
                "run `stackctl project init` first"
            )
        return name

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

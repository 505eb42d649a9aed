"""PackageService: render an application's stack and write the artifacts.

Pipeline: VALIDATE → SELECT → WRITE STACK → RESOLVE ADDONS → WRITE ADDONS → RESPOND

The stack and its parameters are always written before addons are looked
at, so an addons failure leaves the stack artifacts in place.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

from stackctl.domain.errors import (
    ApplicationNotFoundError,
    StackctlError,
)
from stackctl.domain.models import AddonsNotDefined, AddonsTemplate
from stackctl.services.addons import AddonsResolver
from stackctl.services.artifacts import (
    ArtifactWriter,
    Destination,
    DirectoryDestination,
    StreamDestination,
)
from stackctl.services.base import BaseService
from stackctl.services.contracts import PackageAppData, dump_validated
from stackctl.services.result import ServiceResult
from stackctl.services.stack_selector import StackSelector
from stackctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

ADDONS_CONTEXT = "retrieve addons template"


class PackageService(BaseService):
    """Produces deployable CloudFormation artifacts for one app and env."""

    @traced
    def validate(self, project_name: str, app_name: str, env_name: str) -> ServiceResult:
        """Check the app is in the workspace and the env is in the store."""
        op = "validate_package"
        try:
            if app_name not in self._backend.workspace.app_names():
                raise ApplicationNotFoundError(project_name, app_name)
            env = self._backend.store.get_environment(project_name, env_name)
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"app": app_name, "env": env.name, "region": env.region},
        )

    @traced
    def package_app(
        self,
        project_name: str,
        app_name: str,
        env_name: str,
        tag: str,
        *,
        output_dir: Path | None = None,
        stream: TextIO | None = None,
    ) -> ServiceResult:
        """Render and write the stack for *app_name* in *env_name*.

        With *output_dir* the template, parameters and (when defined) the
        addons template are written as files; otherwise the template alone
        goes to *stream* (stdout by default).
        """
        op = "package_app"
        backend = self._backend
        destination: Destination = (
            DirectoryDestination(output_dir)
            if output_dir is not None
            else StreamDestination(stream if stream is not None else sys.stdout)
        )
        writer = ArtifactWriter(destination)
        files: list[Path] = []

        selector = StackSelector(
            project_name,
            workspace=backend.workspace,
            store=backend.store,
            inventory=backend.inventory,
            renderer=backend.renderer,
            log_retention_days=backend.log_retention_days,
        )
        try:
            with trace_span("select_stack", app=app_name, env=env_name, tag=tag):
                artifact = selector.resolve(app_name, env_name, tag)
            with trace_span("write_stack", output_dir=str(output_dir) if output_dir else "-"):
                files.extend(writer.write_stack(app_name, env_name, artifact))
        except StackctlError as exc:
            return ServiceResult.failure(op, exc, data=self._files_payload(files))

        try:
            with trace_span("resolve_addons", app=app_name) as span:
                addons = AddonsResolver(backend.workspace).resolve(app_name)
                if span is not None:
                    span.set_attribute("defined", isinstance(addons, AddonsTemplate))
        except StackctlError as exc:
            return ServiceResult.failure(
                op, exc, context=ADDONS_CONTEXT, data=self._files_payload(files)
            )

        match addons:
            case AddonsNotDefined(path=path):
                logger.debug("No addons for %s (looked in %s)", app_name, path)
            case AddonsTemplate():
                try:
                    files.extend(writer.write_addons(app_name, addons))
                except StackctlError as exc:
                    return ServiceResult.failure(op, exc, data=self._files_payload(files))

        data = dump_validated(
            PackageAppData,
            {
                "app": app_name,
                "env": env_name,
                "tag": tag,
                "output_dir": str(output_dir) if output_dir is not None else None,
                "files_created": [str(p) for p in files],
                "addons": isinstance(addons, AddonsTemplate),
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    @staticmethod
    def _files_payload(files: list[Path]) -> dict[str, list[str]]:
        return {"files_created": [str(p) for p in files]}

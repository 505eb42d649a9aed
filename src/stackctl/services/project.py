"""Project bootstrap and inspection.

:class:`ProjectBootstrapper` is the register → converge state machine
behind ``project init``. Registration tolerates an existing project so the
command can be re-run; convergence always runs and is reported through a
:class:`~stackctl.services.contracts.Progress` sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stackctl.domain.errors import StackctlError, WorkspaceNotFoundError
from stackctl.domain.models import (
    BootstrapState,
    CreateProjectInput,
    Project,
    RegistrationStatus,
)
from stackctl.services.base import BaseService
from stackctl.services.contracts import (
    ApplicationRow,
    EnvironmentRow,
    InitProjectData,
    ShowProjectData,
    dump_validated,
)
from stackctl.services.result import ServiceResult
from stackctl.services.telemetry import traced

if TYPE_CHECKING:
    from stackctl.services.contracts import (
        IdentityService,
        Progress,
        ProjectDeployer,
        ProjectStore,
        WorkspaceService,
    )

logger = logging.getLogger(__name__)

FMT_DEPLOY_START = "Creating the infrastructure to manage container repositories under project {project}."
FMT_DEPLOY_COMPLETE = "Created the infrastructure to manage container repositories under project {project}."
FMT_DEPLOY_FAILED = "Failed to create the infrastructure to manage container repositories under project {project}."


@dataclass(frozen=True)
class BootstrapOutcome:
    project: Project
    registration: RegistrationStatus
    state: BootstrapState


class ProjectBootstrapper:
    """Register a project, bind the workspace, then converge its infrastructure.

    ``state`` moves ``uninitialized → registered → converged``. A failure
    during registration leaves it ``failed``; a failure while deploying
    leaves it ``convergence_failed``. Errors are re-raised unchanged.
    """

    def __init__(
        self,
        identity: IdentityService,
        store: ProjectStore,
        workspace: WorkspaceService,
        deployer: ProjectDeployer,
        progress: Progress,
    ) -> None:
        self._identity = identity
        self._store = store
        self._workspace = workspace
        self._deployer = deployer
        self._progress = progress
        self.state = BootstrapState.UNINITIALIZED

    def execute(self, project_name: str, domain_name: str = "") -> BootstrapOutcome:
        project, registration = self.register(project_name, domain_name)
        self.converge(project)
        return BootstrapOutcome(project=project, registration=registration, state=self.state)

    def register(self, project_name: str, domain_name: str = "") -> tuple[Project, RegistrationStatus]:
        # The store write is not rolled back if binding the workspace fails.
        try:
            caller = self._identity.get()
            project = Project(name=project_name, account_id=caller.account, domain=domain_name)
            registration = self._store.create_project(project)
            self._workspace.create(project_name)
        except Exception:
            self.state = BootstrapState.FAILED
            raise
        if registration is RegistrationStatus.ALREADY_EXISTS:
            logger.info("Project %s already exists, reusing it", project_name)
        self.state = BootstrapState.REGISTERED
        return project, registration

    def converge(self, project: Project) -> None:
        self._progress.start(FMT_DEPLOY_START.format(project=project.name))
        try:
            self._deployer.deploy_project(
                CreateProjectInput(
                    project=project.name,
                    account_id=project.account_id,
                    domain_name=project.domain,
                )
            )
        except Exception:
            self._progress.stop(FMT_DEPLOY_FAILED.format(project=project.name))
            self.state = BootstrapState.CONVERGENCE_FAILED
            raise
        self._progress.stop(FMT_DEPLOY_COMPLETE.format(project=project.name))
        self.state = BootstrapState.CONVERGED


class ProjectService(BaseService):
    """Project lifecycle: init, show and the listings used by prompts."""

    def workspace_project(self) -> str | None:
        """Name of the project this workspace is bound to, if any."""
        try:
            return self._backend.workspace.summary().project_name
        except WorkspaceNotFoundError:
            return None

    @traced
    def init_project(self, project_name: str, *, domain: str = "", progress: Progress) -> ServiceResult:
        """Register *project_name* and deploy its shared infrastructure."""
        op = "init_project"
        backend = self._backend
        bootstrapper = ProjectBootstrapper(
            backend.identity, backend.store, backend.workspace, backend.deployer, progress
        )
        try:
            outcome = bootstrapper.execute(project_name, domain)
        except StackctlError as exc:
            return ServiceResult.failure(
                op, exc, data={"project": project_name, "state": str(bootstrapper.state)}
            )

        warnings: list[str] = []
        if outcome.registration is RegistrationStatus.ALREADY_EXISTS:
            warnings.append(f"Project {project_name} already exists; reusing it")
        data = dump_validated(
            InitProjectData,
            {
                "project": outcome.project.name,
                "account_id": outcome.project.account_id,
                "domain": outcome.project.domain,
                "registration": str(outcome.registration),
                "state": str(outcome.state),
                "workspace_dir": str(backend.workspace.project_dir),
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    def show_project(self, project_name: str) -> ServiceResult:
        op = "show_project"
        store = self._backend.store
        try:
            project = store.get_project(project_name)
            envs = store.list_environments(project_name)
            apps = store.list_applications(project_name)
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)

        data = dump_validated(
            ShowProjectData,
            {
                "name": project.name,
                "account_id": project.account_id,
                "uri": project.domain,
                "environments": [
                    EnvironmentRow(
                        name=e.name, account_id=e.account_id, region=e.region, prod=e.prod
                    ).model_dump()
                    for e in sorted(envs, key=lambda e: e.name)
                ],
                "applications": [
                    ApplicationRow(name=a.name, type=a.type).model_dump()
                    for a in sorted(apps, key=lambda a: a.name)
                ],
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    def list_projects(self) -> ServiceResult:
        op = "list_projects"
        try:
            projects = self._backend.store.list_projects()
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"projects": sorted(p.name for p in projects)})

    def list_environments(self, project_name: str) -> ServiceResult:
        op = "list_environments"
        try:
            envs = self._backend.store.list_environments(project_name)
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"environments": sorted(e.name for e in envs)})

    def list_applications(self, project_name: str, *, local_only: bool = False) -> ServiceResult:
        """Applications in the store, or only those with a workspace manifest."""
        op = "list_applications"
        try:
            if local_only:
                names = self._backend.workspace.app_names()
            else:
                names = [a.name for a in self._backend.store.list_applications(project_name)]
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"applications": sorted(names)})

"""Typed contracts for service and adapter boundaries.

Collaborator protocols describe the narrow interfaces the core consumes
(metadata store, workspace, inventory, renderer, identity, deployer).
Concrete boto3/filesystem adapters live in :mod:`stackctl.infrastructure`;
tests substitute in-memory fakes.

Payload models validate operation payload shapes before they leave the
service layer so key regressions fail fast in tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from stackctl.domain.models import (
        Application,
        Caller,
        CreateProjectInput,
        DeployedStack,
        DeploymentInput,
        Environment,
        Project,
        RegistrationStatus,
        ResourceInventory,
        WorkspaceSummary,
    )


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class ProjectStore(Protocol):
    """Persistent metadata store for projects, environments, applications."""

    def get_project(self, name: str) -> Project: ...

    def list_projects(self) -> list[Project]: ...

    def create_project(self, project: Project) -> RegistrationStatus: ...

    def get_environment(self, project: str, env: str) -> Environment: ...

    def list_environments(self, project: str) -> list[Environment]: ...

    def get_application(self, project: str, app: str) -> Application: ...

    def list_applications(self, project: str) -> list[Application]: ...


class WorkspaceService(Protocol):
    """Local directory holding the project binding and app manifests."""

    @property
    def project_dir(self) -> Path: ...

    def summary(self) -> WorkspaceSummary: ...

    def create(self, project_name: str) -> None: ...

    def app_names(self) -> list[str]: ...

    def read_manifest(self, app_name: str) -> bytes: ...

    def addons_dir(self, app_name: str) -> Path: ...


class InventoryService(Protocol):
    def get_resources_by_region(self, project: Project, region: str) -> ResourceInventory: ...


class StackSerializer(Protocol):
    def template(self) -> str: ...

    def serialized_parameters(self) -> str: ...


class StackRenderer(Protocol):
    def new_stack(self, deployment: DeploymentInput, is_https: bool) -> StackSerializer: ...


class IdentityService(Protocol):
    def get(self) -> Caller: ...


class ProjectDeployer(Protocol):
    def deploy_project(self, project_input: CreateProjectInput) -> None: ...


class StackDescriber(Protocol):
    def describe(
        self,
        project: str,
        env: Environment,
        app_name: str,
        *,
        with_resources: bool = False,
    ) -> DeployedStack | None: ...


class Progress(Protocol):
    """Start/stop progress signals for long-running remote calls."""

    def start(self, message: str) -> None: ...

    def stop(self, message: str) -> None: ...


# ---------------------------------------------------------------------------
# Payload contracts
# ---------------------------------------------------------------------------


class PackageAppData(BaseModel):
    """Payload contract for ``PackageService.package_app``."""

    app: str
    env: str
    tag: str
    output_dir: str | None = None
    files_created: list[str]
    addons: bool


class InitProjectData(BaseModel):
    """Payload contract for ``ProjectService.init_project``."""

    project: str
    account_id: str
    domain: str
    registration: str
    state: str
    workspace_dir: str


class EnvironmentRow(BaseModel):
    name: str
    account_id: str
    region: str
    prod: bool = False


class ApplicationRow(BaseModel):
    name: str
    type: str


class ShowProjectData(BaseModel):
    """Payload contract for ``ProjectService.show_project``."""

    name: str
    account_id: str
    uri: str
    environments: list[EnvironmentRow]
    applications: list[ApplicationRow]


class AppRoute(BaseModel):
    environment: str
    url: str


class AppConfiguration(BaseModel):
    environment: str
    port: str
    tasks: str
    cpu: str
    memory: str


class AppResource(BaseModel):
    type: str
    physical_id: str


class ShowAppData(BaseModel):
    """Payload contract for ``AppService.show_app``."""

    app: str
    type: str
    project: str
    configurations: list[AppConfiguration]
    routes: list[AppRoute]
    resources: dict[str, list[AppResource]]

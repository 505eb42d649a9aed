"""Shared pytest fixtures and in-memory collaborators for stackctl tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from stackctl.domain.errors import (
    ApplicationNotFoundError,
    EnvironmentNotFoundError,
    ProjectNotFoundError,
)
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
)
from stackctl.infrastructure.backend import Backend
from stackctl.infrastructure.workspace import Workspace
from stackctl.services.telemetry import disable_telemetry

ACCOUNT = "111111111111"
REGION = "us-west-2"

FRONTEND_MANIFEST = """\
name: frontend
type: Load Balanced Web App
image:
  build: ./frontend/Dockerfile
  port: 80
http:
  path: '*'
cpu: 256
memory: 512
count: 1
environments:
  prod:
    count: 3
"""

BACKEND_MANIFEST = """\
name: api
type: Backend App
image:
  build: ./api/Dockerfile
  port: 8080
"""


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class _Failing:
    """Mixin: ``fail_on[method] = exc`` makes that method raise *exc*."""

    def __init__(self) -> None:
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[str] = []

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        exc = self.fail_on.get(method)
        if exc is not None:
            raise exc


class FakeStore(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self.projects: dict[str, Project] = {}
        self.environments: dict[tuple[str, str], Environment] = {}
        self.applications: dict[tuple[str, str], Application] = {}

    def add_project(self, name: str, *, domain: str = "") -> Project:
        project = Project(name=name, account_id=ACCOUNT, domain=domain)
        self.projects[name] = project
        return project

    def add_environment(self, project: str, name: str, *, region: str = REGION, prod: bool = False) -> Environment:
        env = Environment(project=project, name=name, region=region, account_id=ACCOUNT, prod=prod)
        self.environments[(project, name)] = env
        return env

    def add_application(self, project: str, name: str, app_type: str = "Load Balanced Web App") -> None:
        self.applications[(project, name)] = Application(project=project, name=name, type=app_type)

    def get_project(self, name: str) -> Project:
        self._enter("get_project")
        if name not in self.projects:
            raise ProjectNotFoundError(name)
        return self.projects[name]

    def list_projects(self) -> list[Project]:
        self._enter("list_projects")
        return list(self.projects.values())

    def create_project(self, project: Project) -> RegistrationStatus:
        self._enter("create_project")
        if project.name in self.projects:
            return RegistrationStatus.ALREADY_EXISTS
        self.projects[project.name] = project
        return RegistrationStatus.CREATED

    def get_environment(self, project: str, env: str) -> Environment:
        self._enter("get_environment")
        if (project, env) not in self.environments:
            raise EnvironmentNotFoundError(project, env)
        return self.environments[(project, env)]

    def list_environments(self, project: str) -> list[Environment]:
        self._enter("list_environments")
        return [e for (p, _), e in self.environments.items() if p == project]

    def get_application(self, project: str, app: str) -> Application:
        self._enter("get_application")
        if (project, app) not in self.applications:
            raise ApplicationNotFoundError(project, app)
        return self.applications[(project, app)]

    def list_applications(self, project: str) -> list[Application]:
        self._enter("list_applications")
        return [a for (p, _), a in self.applications.items() if p == project]


class FakeInventory(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self.urls: dict[str, dict[str, str]] = {}
        self.requests: list[tuple[str, str]] = []

    def add_repository(self, app: str, *, region: str = REGION) -> str:
        url = f"{ACCOUNT}.dkr.ecr.{region}.amazonaws.com/demo/{app}"
        self.urls.setdefault(region, {})[app] = url
        return url

    def get_resources_by_region(self, project: Project, region: str) -> ResourceInventory:
        self._enter("get_resources_by_region")
        self.requests.append((project.name, region))
        return ResourceInventory(repository_urls=dict(self.urls.get(region, {})))


class FakeIdentity(_Failing):
    def get(self) -> Caller:
        self._enter("get")
        return Caller(account=ACCOUNT, arn=f"arn:aws:iam::{ACCOUNT}:user/dev")


class FakeDeployer(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self.inputs: list[CreateProjectInput] = []

    def deploy_project(self, project_input: CreateProjectInput) -> None:
        self._enter("deploy_project")
        self.inputs.append(project_input)


class FakeDescriber(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self.stacks: dict[tuple[str, str], DeployedStack] = {}

    def add_stack(self, env: str, app: str, **kwargs: Any) -> None:
        self.stacks[(env, app)] = DeployedStack(stack_name=f"demo-{env}-{app}", **kwargs)

    def describe(
        self, project: str, env: Environment, app_name: str, *, with_resources: bool = False
    ) -> DeployedStack | None:
        self._enter("describe")
        stack = self.stacks.get((env.name, app_name))
        if stack is not None and not with_resources:
            return stack.model_copy(update={"resources": []})
        return stack


@dataclass
class FakeStack:
    deployment: DeploymentInput
    is_https: bool

    def template(self) -> str:
        variant = "https" if self.is_https else "http"
        return f"# {variant} stack for {self.deployment.app.name}\n"

    def serialized_parameters(self) -> str:
        return f'{{"Parameters": {{"ContainerImage": "{self.deployment.image_repo_url}:{self.deployment.image_tag}"}}}}\n'


class FakeRenderer(_Failing):
    def __init__(self) -> None:
        super().__init__()
        self.stacks: list[FakeStack] = []

    def new_stack(self, deployment: DeploymentInput, is_https: bool) -> FakeStack:
        self._enter("new_stack")
        stack = FakeStack(deployment, is_https)
        self.stacks.append(stack)
        return stack


@dataclass
class RecordingProgress:
    events: list[tuple[str, str]] = field(default_factory=list)

    def start(self, message: str) -> None:
        self.events.append(("start", message))

    def stop(self, message: str) -> None:
        self.events.append(("stop", message))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None]:
    """Undo the logging and telemetry switches a CLI invocation flips."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    ours = logging.getLogger("stackctl")
    our_level = ours.level
    yield
    disable_telemetry()
    root.handlers = handlers
    root.setLevel(level)
    ours.setLevel(our_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Workspace on a temp directory, not yet bound to any project."""
    return Workspace(tmp_path)


def add_app(ws: Workspace, name: str, manifest: str = FRONTEND_MANIFEST) -> Path:
    """Write ``<ws>/<name>/manifest.yml`` and return the app directory."""
    app_dir = ws.project_dir / name
    app_dir.mkdir(parents=True, exist_ok=True)
    (app_dir / "manifest.yml").write_text(manifest, encoding="utf-8")
    return app_dir


@pytest.fixture
def store() -> FakeStore:
    s = FakeStore()
    s.add_project("demo")
    s.add_environment("demo", "test")
    return s


@pytest.fixture
def inventory() -> FakeInventory:
    inv = FakeInventory()
    inv.add_repository("frontend")
    return inv


@pytest.fixture
def backend(workspace: Workspace, store: FakeStore, inventory: FakeInventory) -> Backend:
    """Backend wired entirely from in-memory fakes and a temp workspace."""
    return Backend(
        workspace=workspace,
        store=store,
        inventory=inventory,
        identity=FakeIdentity(),
        deployer=FakeDeployer(),
        describer=FakeDescriber(),
        renderer=FakeRenderer(),
    )


@pytest.fixture
def bound_backend(backend: Backend) -> Backend:
    """Backend whose workspace is registered to ``demo`` with a ``frontend`` app."""
    backend.workspace.create("demo")
    add_app(backend.workspace, "frontend")  # type: ignore[arg-type]
    return backend


@pytest.fixture
def cli_backend(
    bound_backend: Backend, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Backend:
    """Route the CLI's backend construction to the fake backend."""
    monkeypatch.delenv("STACKCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Backend, "from_settings", classmethod(lambda cls, settings: bound_backend))
    return bound_backend


@pytest.fixture
def make_app() -> Any:
    """Return the ``add_app(workspace, name, manifest=FRONTEND_MANIFEST)`` helper."""
    return add_app


@pytest.fixture
def backend_manifest() -> str:
    return BACKEND_MANIFEST


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()

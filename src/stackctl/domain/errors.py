"""Error taxonomy for stackctl.

Every failure the core can report is a :class:`StackctlError` subclass
carrying a stable ``code`` and a ``detail`` dict, so the service layer can
turn it into a :class:`~stackctl.services.result.ServiceError` without
string matching.

Two outcomes are returned as values rather than raised:

- "project already exists" during registration is
  :attr:`~stackctl.domain.models.RegistrationStatus.ALREADY_EXISTS`.
- "no addons defined" is :class:`~stackctl.domain.models.AddonsNotDefined`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

NOT_FOUND = "NOT_FOUND"
ALREADY_EXISTS = "ALREADY_EXISTS"
REPO_NOT_FOUND = "REPO_NOT_FOUND"
UNSUPPORTED_MANIFEST_TYPE = "UNSUPPORTED_MANIFEST_TYPE"
TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
RENDER_FAILURE = "RENDER_FAILURE"
IO_FAILURE = "IO_FAILURE"
MANIFEST_PARSE = "MANIFEST_PARSE"
INVALID_INPUT = "INVALID_INPUT"


class StackctlError(Exception):
    """Base class for all expected stackctl failures."""

    code: str = "ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


# --- NotFound ---------------------------------------------------------------


class NotFoundError(StackctlError):
    code = NOT_FOUND


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project: str) -> None:
        super().__init__(f"couldn't find project {project}", project=project)
        self.project = project


class EnvironmentNotFoundError(NotFoundError):
    def __init__(self, project: str, env: str) -> None:
        super().__init__(
            f"couldn't find environment {env} in the project {project}",
            project=project,
            env=env,
        )
        self.project = project
        self.env = env


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, project: str, app: str) -> None:
        super().__init__(
            f"couldn't find application {app} in the project {project}",
            project=project,
            app=app,
        )
        self.project = project
        self.app = app


class WorkspaceNotFoundError(NotFoundError):
    def __init__(self, start: Path, directory: str) -> None:
        super().__init__(
            f"couldn't find a {directory} directory starting from {start}",
            start=str(start),
            directory=directory,
        )


class WorkspaceConflictError(StackctlError):
    """The workspace is already bound to a different project."""

    code = ALREADY_EXISTS

    def __init__(self, existing: str, requested: str) -> None:
        super().__init__(
            f"workspace is already registered to project {existing}, not {requested}",
            existing=existing,
            requested=requested,
        )


# --- Resolution --------------------------------------------------------------


class RepoNotFoundError(StackctlError):
    """The resource inventory has no image repository for the application.

    Equality compares the three context fields so tests and callers can
    match on a specific (app, region, account) triple.
    """

    code = REPO_NOT_FOUND

    def __init__(self, app_name: str, env_region: str, proj_account_id: str) -> None:
        super().__init__(
            f"ECR repository not found for application {app_name} "
            f"in region {env_region} and account {proj_account_id}",
            app_name=app_name,
            env_region=env_region,
            proj_account_id=proj_account_id,
        )
        self.app_name = app_name
        self.env_region = env_region
        self.proj_account_id = proj_account_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepoNotFoundError):
            return NotImplemented
        return (self.app_name, self.env_region, self.proj_account_id) == (
            other.app_name,
            other.env_region,
            other.proj_account_id,
        )

    def __hash__(self) -> int:
        return hash((self.app_name, self.env_region, self.proj_account_id))


class UnsupportedManifestTypeError(StackctlError):
    code = UNSUPPORTED_MANIFEST_TYPE

    def __init__(self, manifest_type: str) -> None:
        super().__init__(
            f"create CloudFormation template for manifest of type {manifest_type}",
            type=manifest_type,
        )
        self.manifest_type = manifest_type


class ManifestParseError(StackctlError):
    code = MANIFEST_PARSE


class InvalidNameError(StackctlError):
    code = INVALID_INPUT


# --- Transport ---------------------------------------------------------------


class TransportError(StackctlError):
    """A remote collaborator was unreachable or returned an error."""

    code = TRANSPORT_FAILURE


class StoreUnavailableError(TransportError):
    pass


class InventoryUnavailableError(TransportError):
    pass


class IdentityUnavailableError(TransportError):
    pass


class DeployError(TransportError):
    pass


class DescribeError(TransportError):
    pass


# --- Render ------------------------------------------------------------------


class RenderError(StackctlError):
    code = RENDER_FAILURE


class AddonsRenderError(RenderError):
    pass


# --- IO ----------------------------------------------------------------------


class LocalIOError(StackctlError):
    code = IO_FAILURE


class ManifestReadError(LocalIOError):
    pass


class AddonsReadError(LocalIOError):
    pass


class ArtifactWriteError(LocalIOError):
    def __init__(self, action: str, path: Path, cause: OSError) -> None:
        super().__init__(f"{action} {path}: {cause}", path=str(path))
        self.path = path

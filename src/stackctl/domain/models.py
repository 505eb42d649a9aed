"""Records exchanged between the core and its collaborators.

Project and Environment are owned by the metadata store. Everything else
is built fresh per command invocation and discarded at exit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from stackctl.domain.manifest import LoadBalancedWebAppManifest


# --- Metadata store records ---


class Project(BaseModel):
    """An account-wide umbrella for environments and applications."""

    model_config = {"frozen": True}

    name: str
    account_id: str
    domain: str = ""

    @property
    def requires_dns_delegation(self) -> bool:
        return self.domain != ""


class Environment(BaseModel):
    """A named deployment target scoped to a project."""

    model_config = {"frozen": True}

    project: str
    name: str
    region: str
    account_id: str
    prod: bool = False


class Application(BaseModel):
    """A deployed application as recorded in the metadata store."""

    model_config = {"frozen": True}

    project: str
    name: str
    type: str


class RegistrationStatus(StrEnum):
    """Outcome of ``ProjectStore.create_project``."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


# --- Remote lookups ---


class ResourceInventory(BaseModel):
    """Per-application resources already provisioned for one project+region."""

    model_config = {"frozen": True}

    repository_urls: dict[str, str] = Field(default_factory=dict)


class Caller(BaseModel):
    """Identity of the credentials in use."""

    model_config = {"frozen": True}

    account: str
    arn: str = ""
    user_id: str = ""


class CreateProjectInput(BaseModel):
    """Arguments for converging a project's shared infrastructure."""

    model_config = {"frozen": True}

    project: str
    account_id: str
    domain_name: str = ""


class DeployedStack(BaseModel):
    """Live view of an application's stack in one environment."""

    model_config = {"frozen": True}

    stack_name: str
    outputs: dict[str, str] = Field(default_factory=dict)
    parameters: dict[str, str] = Field(default_factory=dict)
    resources: list[dict[str, str]] = Field(default_factory=list)


# --- Packaging values ---


@dataclass(frozen=True)
class DeploymentInput:
    """Everything the renderer needs for one application in one environment."""

    app: LoadBalancedWebAppManifest
    env: Environment
    image_repo_url: str
    image_tag: str


@dataclass(frozen=True)
class RenderedArtifact:
    """Template and parameter bodies, routed verbatim."""

    template: str
    parameters: str


@dataclass(frozen=True)
class AddonsTemplate:
    template: str


@dataclass(frozen=True)
class AddonsNotDefined:
    """The application has no addons directory; nothing to package."""

    app_name: str
    path: Path


AddonsResult = AddonsTemplate | AddonsNotDefined


# --- Workspace ---


class WorkspaceSummary(BaseModel):
    model_config = {"frozen": True}

    project_name: str


# --- Bootstrap ---


class BootstrapState(StrEnum):
    UNINITIALIZED = "uninitialized"
    REGISTERED = "registered"
    CONVERGED = "converged"
    FAILED = "failed"
    CONVERGENCE_FAILED = "convergence_failed"

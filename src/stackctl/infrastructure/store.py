"""Metadata store backed by SSM Parameter Store.

Records are JSON documents under a common prefix::

    /ecs-cli-v2/{project}
    /ecs-cli-v2/{project}/environments/{env}
    /ecs-cli-v2/{project}/applications/{app}

Project creation never overwrites: an existing parameter is reported as
:attr:`RegistrationStatus.ALREADY_EXISTS` so registration can be re-run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from functools import cached_property
from typing import TYPE_CHECKING, Any, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from stackctl.domain.errors import (
    ApplicationNotFoundError,
    EnvironmentNotFoundError,
    ProjectNotFoundError,
    StoreUnavailableError,
)
from stackctl.domain.models import Application, Environment, Project, RegistrationStatus
from stackctl.infrastructure.aws import error_code

if TYPE_CHECKING:
    from stackctl.infrastructure.aws import SessionProvider

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

_T = TypeVar("_T")


class SSMProjectStore:
    """Read and write project metadata in SSM Parameter Store."""

    def __init__(self, session: SessionProvider, *, prefix: str = "/ecs-cli-v2") -> None:
        self._session = session
        self._prefix = "/" + prefix.strip("/")

    @cached_property
    def _ssm(self) -> Any:
        return self._session.client("ssm")

    # --- paths ---

    def _project_path(self, project: str) -> str:
        return f"{self._prefix}/{project}"

    def _env_path(self, project: str, env: str = "") -> str:
        return f"{self._prefix}/{project}/environments/{env}"

    def _app_path(self, project: str, app: str = "") -> str:
        return f"{self._prefix}/{project}/applications/{app}"

    # --- raw access ---

    def _get(self, path: str, build: Callable[[dict[str, Any]], _T]) -> _T | None:
        try:
            resp = self._ssm.get_parameter(Name=path)
        except ClientError as exc:
            if error_code(exc) == "ParameterNotFound":
                return None
            raise StoreUnavailableError(f"get parameter {path}: {exc}", path=path) from exc
        except BotoCoreError as exc:
            raise StoreUnavailableError(f"get parameter {path}: {exc}", path=path) from exc
        return _decode(path, resp["Parameter"]["Value"], build)

    def _list(self, path: str, build: Callable[[dict[str, Any]], _T]) -> list[_T]:
        records: list[_T] = []
        try:
            paginator = self._ssm.get_paginator("get_parameters_by_path")
            for page in paginator.paginate(Path=path, Recursive=False):
                records.extend(
                    _decode(p.get("Name", path), p["Value"], build) for p in page.get("Parameters", [])
                )
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"list parameters under {path}: {exc}", path=path) from exc
        return records

    # --- projects ---

    def get_project(self, name: str) -> Project:
        project = self._get(self._project_path(name), _project_from)
        if project is None:
            raise ProjectNotFoundError(name)
        return project

    def list_projects(self) -> list[Project]:
        return self._list(self._prefix + "/", _project_from)

    def create_project(self, project: Project) -> RegistrationStatus:
        path = self._project_path(project.name)
        value = json.dumps(
            {
                "name": project.name,
                "account": project.account_id,
                "domain": project.domain,
                "version": SCHEMA_VERSION,
            }
        )
        try:
            self._ssm.put_parameter(
                Name=path,
                Description="An ECS-CLI Project",
                Type="String",
                Value=value,
                Overwrite=False,
            )
        except ClientError as exc:
            if error_code(exc) == "ParameterAlreadyExists":
                logger.debug("Project %s already registered", project.name)
                return RegistrationStatus.ALREADY_EXISTS
            raise StoreUnavailableError(
                f"create project {project.name}: {exc}", project=project.name
            ) from exc
        except BotoCoreError as exc:
            raise StoreUnavailableError(
                f"create project {project.name}: {exc}", project=project.name
            ) from exc
        logger.debug("Created project %s", project.name)
        return RegistrationStatus.CREATED

    # --- environments ---

    def get_environment(self, project: str, env: str) -> Environment:
        environment = self._get(self._env_path(project, env), _environment_from)
        if environment is None:
            raise EnvironmentNotFoundError(project, env)
        return environment

    def list_environments(self, project: str) -> list[Environment]:
        return self._list(self._env_path(project), _environment_from)

    # --- applications ---

    def get_application(self, project: str, app: str) -> Application:
        application = self._get(self._app_path(project, app), _application_from)
        if application is None:
            raise ApplicationNotFoundError(project, app)
        return application

    def list_applications(self, project: str) -> list[Application]:
        return self._list(self._app_path(project), _application_from)


def _decode(path: str, value: str, build: Callable[[dict[str, Any]], _T]) -> _T:
    """Parse the JSON document stored at *path* into a record.

    Raises:
        StoreUnavailableError: the value is not JSON or lacks required keys.
    """
    try:
        return build(json.loads(value))
    except (ValueError, KeyError, TypeError) as exc:
        raise StoreUnavailableError(f"decode parameter {path}: {exc!r}", path=path) from exc


def _project_from(data: dict[str, Any]) -> Project:
    return Project(
        name=data["name"],
        account_id=data.get("account", ""),
        domain=data.get("domain", ""),
    )


def _environment_from(data: dict[str, Any]) -> Environment:
    return Environment(
        project=data["project"],
        name=data["name"],
        region=data["region"],
        account_id=data.get("accountID", ""),
        prod=bool(data.get("prod", False)),
    )


def _application_from(data: dict[str, Any]) -> Application:
    return Application(project=data["project"], name=data["name"], type=data.get("type", ""))

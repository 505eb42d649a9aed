"""Converge a project's shared infrastructure with CloudFormation.

Deployment is two steps, each safe to repeat:

1. Create or update the ``{project}-infrastructure-roles`` stack and wait
   for it to settle. "No updates are to be performed" counts as success.
2. Create the ``{project}-infrastructure`` stack set if it is missing.

Nothing here retries; a failed deploy is recovered by re-running the
command, which picks up from whatever state CloudFormation reached.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError, WaiterError
from jinja2 import TemplateError

from stackctl.domain.errors import DeployError
from stackctl.domain.names import project_roles_stack_name, project_stack_set_name
from stackctl.infrastructure.aws import error_code, error_message
from stackctl.infrastructure.templates import build_template_environment

if TYPE_CHECKING:
    from jinja2 import Environment

    from stackctl.domain.models import CreateProjectInput
    from stackctl.infrastructure.aws import SessionProvider

logger = logging.getLogger(__name__)

_NO_UPDATES = "No updates are to be performed"
_CAPABILITIES = ["CAPABILITY_NAMED_IAM"]


def admin_role_name(project: str) -> str:
    return f"{project}-adminrole"


def execution_role_name(project: str) -> str:
    return f"{project}-executionrole"


def dns_delegation_role_name(project: str) -> str:
    return f"{project}-DNSDelegationRole"


class CloudFormationDeployer:
    """Deploy project-level stacks in the session's default region."""

    def __init__(self, session: SessionProvider, env: Environment | None = None) -> None:
        self._session = session
        self._env = env or build_template_environment("project")

    @cached_property
    def _cfn(self) -> Any:
        return self._session.client("cloudformation")

    def deploy_project(self, project_input: CreateProjectInput) -> None:
        project = project_input.project
        try:
            self._deploy_roles(project_input)
            self._ensure_stack_set(project_input)
        except (BotoCoreError, ClientError, WaiterError) as exc:
            raise DeployError(f"deploy project {project}: {exc}", project=project) from exc
        except TemplateError as exc:
            raise DeployError(
                f"render infrastructure template for project {project}: {exc}", project=project
            ) from exc

    def _deploy_roles(self, project_input: CreateProjectInput) -> None:
        project = project_input.project
        stack_name = project_roles_stack_name(project)
        body = self._env.get_template("roles.yml.j2").render(project=project)
        params = [
            {"ParameterKey": "AdminRoleName", "ParameterValue": admin_role_name(project)},
            {"ParameterKey": "ExecutionRoleName", "ParameterValue": execution_role_name(project)},
            {
                "ParameterKey": "ProjectDNSDelegationRole",
                "ParameterValue": dns_delegation_role_name(project),
            },
            {"ParameterKey": "ProjectDomainName", "ParameterValue": project_input.domain_name},
        ]
        args: dict[str, Any] = {
            "StackName": stack_name,
            "TemplateBody": body,
            "Parameters": params,
            "Capabilities": _CAPABILITIES,
            "Tags": [{"Key": "ecs-project", "Value": project}],
        }

        try:
            self._cfn.create_stack(**args)
            waiter_name = "stack_create_complete"
            logger.debug("Creating stack %s", stack_name)
        except ClientError as exc:
            if error_code(exc) != "AlreadyExistsException":
                raise
            try:
                self._cfn.update_stack(**args)
            except ClientError as update_exc:
                if _NO_UPDATES in error_message(update_exc):
                    logger.debug("Stack %s is up to date", stack_name)
                    return
                raise
            waiter_name = "stack_update_complete"
            logger.debug("Updating stack %s", stack_name)

        self._cfn.get_waiter(waiter_name).wait(StackName=stack_name)

    def _ensure_stack_set(self, project_input: CreateProjectInput) -> None:
        project = project_input.project
        name = project_stack_set_name(project)
        body = self._env.get_template("stackset.yml.j2").render(project=project)
        admin_arn = f"arn:aws:iam::{project_input.account_id}:role/{admin_role_name(project)}"
        try:
            self._cfn.create_stack_set(
                StackSetName=name,
                Description=f"Cross-regional resources to support the project {project}",
                TemplateBody=body,
                AdministrationRoleARN=admin_arn,
                ExecutionRoleName=execution_role_name(project),
                Tags=[{"Key": "ecs-project", "Value": project}],
            )
        except ClientError as exc:
            if error_code(exc) != "NameAlreadyExistsException":
                raise
            logger.debug("Stack set %s already exists", name)
            return
        logger.debug("Created stack set %s", name)

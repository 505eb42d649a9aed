"""CloudFormation stacks for load-balanced web applications.

The renderer turns a :class:`~stackctl.domain.models.DeploymentInput` into
a template body and a JSON parameter document. Whether the stack serves
HTTPS is decided by the caller and passed in; it is never inferred here.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar

from jinja2 import TemplateError

from stackctl.domain.errors import RenderError
from stackctl.domain.names import app_stack_name
from stackctl.infrastructure.templates import build_template_environment

if TYPE_CHECKING:
    from jinja2 import Environment

    from stackctl.domain.models import DeploymentInput

# Parameter keys shared by both stack variants.
PARAM_PROJECT_NAME = "ProjectName"
PARAM_ENV_NAME = "EnvName"
PARAM_APP_NAME = "AppName"
PARAM_CONTAINER_IMAGE = "ContainerImage"
PARAM_CONTAINER_PORT = "ContainerPort"
PARAM_RULE_PATH = "RulePath"
PARAM_TASK_CPU = "TaskCPU"
PARAM_TASK_MEMORY = "TaskMemory"
PARAM_TASK_COUNT = "TaskCount"
PARAM_HTTPS_ENABLED = "HTTPSEnabled"
PARAM_LOG_RETENTION = "LogRetention"


class LBFargateStack:
    """Load-balanced Fargate service listening on HTTP."""

    template_name: ClassVar[str] = "lb-fargate.yml.j2"
    https: ClassVar[bool] = False

    def __init__(self, deployment: DeploymentInput, env: Environment) -> None:
        self._in = deployment
        self._env = env
        self._app = deployment.app.apply_environment(deployment.env.name)

    @property
    def name(self) -> str:
        return app_stack_name(self._in.env.project, self._in.env.name, self._app.name)

    def template(self) -> str:
        try:
            tpl = self._env.get_template(self.template_name)
            return tpl.render(
                app=self._app,
                env=self._in.env,
                stack_name=self.name,
                variables=self._app.variables,
                secrets=self._app.secrets,
            )
        except TemplateError as exc:
            raise RenderError(
                f"template for application {self._app.name}: {exc}",
                app=self._app.name,
                template=self.template_name,
            ) from exc

    def parameters(self) -> dict[str, str]:
        """CloudFormation parameter values, all serialized as strings."""
        port = self._app.image.port
        return {
            PARAM_PROJECT_NAME: self._in.env.project,
            PARAM_ENV_NAME: self._in.env.name,
            PARAM_APP_NAME: self._app.name,
            PARAM_CONTAINER_IMAGE: f"{self._in.image_repo_url}:{self._in.image_tag}",
            PARAM_CONTAINER_PORT: "" if port is None else str(port),
            PARAM_RULE_PATH: self._app.http.path,
            PARAM_TASK_CPU: str(self._app.cpu),
            PARAM_TASK_MEMORY: str(self._app.memory),
            PARAM_TASK_COUNT: str(self._app.count),
            PARAM_HTTPS_ENABLED: str(self.https).lower(),
            PARAM_LOG_RETENTION: str(self._app.log_retention),
        }

    def serialized_parameters(self) -> str:
        """The parameter file body, as accepted by ``aws cloudformation deploy``."""
        doc: dict[str, Any] = {"Parameters": self.parameters()}
        return json.dumps(doc, indent=2) + "\n"


class HTTPSLBFargateStack(LBFargateStack):
    """Load-balanced Fargate service behind an HTTPS listener.

    Used when the project delegates a domain, so the environment owns a
    certificate for ``<app>.<env>.<project>.<domain>``.
    """

    template_name: ClassVar[str] = "https-lb-fargate.yml.j2"
    https: ClassVar[bool] = True


class JinjaStackRenderer:
    """Select the stack variant and render it from packaged templates."""

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env or build_template_environment("stacks")

    def new_stack(self, deployment: DeploymentInput, is_https: bool) -> LBFargateStack:
        stack_cls = HTTPSLBFargateStack if is_https else LBFargateStack
        return stack_cls(deployment, self._env)

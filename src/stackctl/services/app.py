"""AppService: inspect a deployed application across its environments."""

from __future__ import annotations

from stackctl.domain.errors import StackctlError
from stackctl.infrastructure.stack import (
    PARAM_CONTAINER_PORT,
    PARAM_TASK_COUNT,
    PARAM_TASK_CPU,
    PARAM_TASK_MEMORY,
)
from stackctl.services.base import BaseService
from stackctl.services.contracts import (
    AppConfiguration,
    AppResource,
    AppRoute,
    ShowAppData,
    dump_validated,
)
from stackctl.services.result import ServiceResult
from stackctl.services.telemetry import trace_span, traced

SERVICE_URL_OUTPUT = "ServiceURL"


class AppService(BaseService):
    """Read-only views of applications recorded in the metadata store."""

    @traced
    def show_app(self, project_name: str, app_name: str, *, with_resources: bool = False) -> ServiceResult:
        """Describe *app_name* in every environment it is deployed to.

        Environments without a stack for the app are skipped.
        """
        op = "show_app"
        backend = self._backend
        configurations: list[AppConfiguration] = []
        routes: list[AppRoute] = []
        resources: dict[str, list[AppResource]] = {}

        try:
            app = backend.store.get_application(project_name, app_name)
            envs = sorted(backend.store.list_environments(project_name), key=lambda e: e.name)
            for env in envs:
                with trace_span("describe_stack", env=env.name, region=env.region):
                    stack = backend.describer.describe(
                        project_name, env, app_name, with_resources=with_resources
                    )
                if stack is None:
                    continue
                params = stack.parameters
                configurations.append(
                    AppConfiguration(
                        environment=env.name,
                        port=params.get(PARAM_CONTAINER_PORT, ""),
                        tasks=params.get(PARAM_TASK_COUNT, ""),
                        cpu=params.get(PARAM_TASK_CPU, ""),
                        memory=params.get(PARAM_TASK_MEMORY, ""),
                    )
                )
                url = stack.outputs.get(SERVICE_URL_OUTPUT)
                if url:
                    routes.append(AppRoute(environment=env.name, url=url))
                if with_resources:
                    resources[env.name] = [
                        AppResource(type=r.get("type", ""), physical_id=r.get("physical_id", ""))
                        for r in stack.resources
                    ]
        except StackctlError as exc:
            return ServiceResult.failure(op, exc)

        data = dump_validated(
            ShowAppData,
            {
                "app": app.name,
                "type": app.type,
                "project": project_name,
                "configurations": [c.model_dump() for c in configurations],
                "routes": [r.model_dump() for r in routes],
                "resources": {k: [r.model_dump() for r in v] for k, v in resources.items()},
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

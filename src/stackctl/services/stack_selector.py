"""StackSelector: resolve an application manifest into a rendered stack.

Pipeline: MANIFEST → PROJECT/ENV → INVENTORY → REPOSITORY → DISPATCH → RENDER

The manifest is read and parsed before anything remote is touched, so a
broken manifest is always reported ahead of store or inventory failures.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from stackctl.domain.errors import RepoNotFoundError, UnsupportedManifestTypeError
from stackctl.domain.manifest import (
    DEFAULT_LOG_RETENTION_DAYS,
    BackendAppManifest,
    LoadBalancedWebAppManifest,
    parse_manifest,
)
from stackctl.domain.models import DeploymentInput, RenderedArtifact
from stackctl.services.telemetry import trace_span

if TYPE_CHECKING:
    from stackctl.domain.models import Environment, Project
    from stackctl.services.contracts import (
        InventoryService,
        ProjectStore,
        StackRenderer,
        WorkspaceService,
    )

logger = logging.getLogger(__name__)


class StackSelector:
    """Build the CloudFormation template and parameters for one app in one env."""

    def __init__(
        self,
        project_name: str,
        *,
        workspace: WorkspaceService,
        store: ProjectStore,
        inventory: InventoryService,
        renderer: StackRenderer,
        log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ) -> None:
        self._project_name = project_name
        self._workspace = workspace
        self._store = store
        self._inventory = inventory
        self._renderer = renderer
        self._log_retention_days = log_retention_days

    def resolve(self, app_name: str, env_name: str, image_tag: str) -> RenderedArtifact:
        """Render the stack for *app_name* in *env_name*.

        Raises:
            ManifestReadError, ManifestParseError: the manifest is unusable.
            NotFoundError: the project or environment is not in the store.
            InventoryUnavailableError: the inventory could not be fetched.
            RepoNotFoundError: no image repository exists for the app there.
            UnsupportedManifestTypeError: the manifest type is not deployable.
            RenderError: the renderer failed.
        """
        with trace_span("parse_manifest", app=app_name) as span:
            manifest = parse_manifest(self._workspace.read_manifest(app_name))
            if span is not None:
                span.set_attribute("type", manifest.type)

        with trace_span("lookup_environment", project=self._project_name, env=env_name) as span:
            project = self._store.get_project(self._project_name)
            env = self._store.get_environment(self._project_name, env_name)
            if span is not None:
                span.set_attribute("region", env.region)

        with trace_span("lookup_repository", region=env.region, account=project.account_id):
            repo_url = self._repository_url(project, env, app_name)

        match manifest:
            case LoadBalancedWebAppManifest():
                return self._render_lb_web_app(manifest, project, env, repo_url, image_tag)
            case BackendAppManifest():
                raise UnsupportedManifestTypeError(manifest.type)
            case _:
                assert_never(manifest)

    def _repository_url(self, project: Project, env: Environment, app_name: str) -> str:
        resources = self._inventory.get_resources_by_region(project, env.region)
        repo_url = resources.repository_urls.get(app_name)
        if repo_url is None:
            raise RepoNotFoundError(app_name, env.region, project.account_id)
        return repo_url

    def _render_lb_web_app(
        self,
        manifest: LoadBalancedWebAppManifest,
        project: Project,
        env: Environment,
        repo_url: str,
        image_tag: str,
    ) -> RenderedArtifact:
        deployment = DeploymentInput(
            app=manifest.with_log_retention(self._log_retention_days),
            env=env,
            image_repo_url=repo_url,
            image_tag=image_tag,
        )
        is_https = project.requires_dns_delegation
        logger.debug(
            "Rendering %s stack for %s in %s",
            "HTTPS" if is_https else "HTTP",
            manifest.name,
            env.name,
        )
        with trace_span("render_stack", variant="https" if is_https else "http"):
            stack = self._renderer.new_stack(deployment, is_https)
            return RenderedArtifact(template=stack.template(), parameters=stack.serialized_parameters())

"""Application manifests: the typed form of ``<workspace>/<app>/manifest.yml``.

Manifests form a closed tagged union discriminated by the ``type`` key.
Only :class:`LoadBalancedWebAppManifest` is deployable today; the packaging
path dispatches over the union with an exhaustive ``match`` so a new
variant must be handled explicitly.

Example manifest::

    name: frontend
    type: Load Balanced Web App
    image:
      build: ./Dockerfile
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

from __future__ import annotations

from typing import Annotated, Any, Literal, Self

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from stackctl.domain.errors import ManifestParseError

LOAD_BALANCED_WEB_APP = "Load Balanced Web App"
BACKEND_APP = "Backend App"

MANIFEST_TYPES: tuple[str, ...] = (LOAD_BALANCED_WEB_APP, BACKEND_APP)

DEFAULT_LOG_RETENTION_DAYS = 30


class ImageConfig(BaseModel):
    model_config = {"frozen": True}

    build: str = ""
    port: int | None = None


class RoutingRule(BaseModel):
    model_config = {"frozen": True}

    path: str = "*"


class EnvironmentOverride(BaseModel):
    """Per-environment values layered over the top-level manifest fields."""

    model_config = {"frozen": True}

    cpu: int | None = None
    memory: int | None = None
    count: int | None = None
    http: RoutingRule | None = None
    variables: dict[str, str] = Field(default_factory=dict)
    secrets: dict[str, str] = Field(default_factory=dict)


class _TaskManifest(BaseModel):
    model_config = {"frozen": True}

    name: str
    image: ImageConfig = Field(default_factory=ImageConfig)
    cpu: int = 256
    memory: int = 512
    count: int = 1
    variables: dict[str, str] = Field(default_factory=dict)
    secrets: dict[str, str] = Field(default_factory=dict)
    environments: dict[str, EnvironmentOverride] = Field(default_factory=dict)

    def apply_environment(self, env_name: str) -> Self:
        """Return a copy with the overrides for *env_name* applied.

        Scalars replace, ``variables`` and ``secrets`` merge key by key.
        """
        override = self.environments.get(env_name)
        if override is None:
            return self
        updates: dict[str, Any] = {
            key: value
            for key, value in (
                ("cpu", override.cpu),
                ("memory", override.memory),
                ("count", override.count),
            )
            if value is not None
        }
        if override.http is not None and "http" in type(self).model_fields:
            updates["http"] = override.http
        if override.variables:
            updates["variables"] = {**self.variables, **override.variables}
        if override.secrets:
            updates["secrets"] = {**self.secrets, **override.secrets}
        return self.model_copy(update=updates)


class LoadBalancedWebAppManifest(_TaskManifest):
    """A public service behind an Application Load Balancer."""

    type: Literal["Load Balanced Web App"]
    http: RoutingRule = Field(default_factory=RoutingRule)
    log_retention: int = DEFAULT_LOG_RETENTION_DAYS

    def with_log_retention(self, days: int) -> LoadBalancedWebAppManifest:
        return self.model_copy(update={"log_retention": days})


class BackendAppManifest(_TaskManifest):
    """A private service reachable only through service discovery."""

    type: Literal["Backend App"]


ApplicationManifest = Annotated[
    LoadBalancedWebAppManifest | BackendAppManifest,
    Field(discriminator="type"),
]

_manifest_adapter: TypeAdapter[LoadBalancedWebAppManifest | BackendAppManifest] = TypeAdapter(
    ApplicationManifest
)


def parse_manifest(raw: bytes | str) -> LoadBalancedWebAppManifest | BackendAppManifest:
    """Decode and validate a manifest document.

    Raises:
        ManifestParseError: bytes that are not UTF-8, malformed YAML, a
            non-mapping document, an unknown ``type``, or fields that fail
            validation.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as exc:
        raise ManifestParseError(f"decode manifest: {exc}") from exc
    try:
        data = YAML(typ="safe").load(text)
    except YAMLError as exc:
        raise ManifestParseError(f"unmarshal manifest: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestParseError("unmarshal manifest: expected a mapping at the top level")

    manifest_type = data.get("type")
    if manifest_type not in MANIFEST_TYPES:
        raise ManifestParseError(
            f"invalid manifest type {manifest_type!r}, must be one of: {', '.join(MANIFEST_TYPES)}",
            type=str(manifest_type),
        )

    try:
        return _manifest_adapter.validate_python(data)
    except ValidationError as exc:
        raise ManifestParseError(f"validate manifest: {exc}") from exc

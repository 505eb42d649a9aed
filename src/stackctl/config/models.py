"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, stackctl.toml only contains
overrides. Most users need no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel

from stackctl.domain.manifest import DEFAULT_LOG_RETENTION_DAYS


class AwsConfig(BaseModel):
    """[aws] section. Unset values fall back to the boto3 credential chain."""

    model_config = {"frozen": True}

    profile: str | None = None
    region: str | None = None


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    directory: str = "ecs-project"
    summary_file: str = ".ecs-workspace"


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    parameter_prefix: str = "/ecs-cli-v2"


class PackageConfig(BaseModel):
    """[package] section."""

    model_config = {"frozen": True}

    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    output_dir: str | None = None

"""boto3 session and client construction.

Clients are built on demand so that commands which never touch AWS (and
``--help``) do not need credentials or a configured region.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import cached_property
from typing import Any

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

_USER_AGENT_EXTRA = "stackctl"


class SessionProvider:
    """Owns a single boto3 session for the lifetime of a command.

    *on_client* is called with every client the provider creates; the
    verbose CLI uses it to hook request tracing into botocore's events.
    """

    def __init__(
        self,
        *,
        profile: str | None = None,
        region: str | None = None,
        on_client: Callable[[Any], None] | None = None,
    ) -> None:
        self._profile = profile
        self._region = region
        self._on_client = on_client

    @cached_property
    def session(self) -> boto3.Session:
        logger.debug("Creating AWS session (profile=%s, region=%s)", self._profile, self._region)
        return boto3.Session(profile_name=self._profile, region_name=self._region)

    def client(self, service: str, *, region: str | None = None) -> Any:
        """Return a client for *service*, optionally pinned to *region*."""
        client = self.session.client(
            service,
            region_name=region or self._region,
            config=Config(user_agent_extra=_USER_AGENT_EXTRA),
        )
        if self._on_client is not None:
            self._on_client(client)
        return client


def error_code(exc: Exception) -> str:
    """Extract the AWS error code from a botocore ``ClientError``."""
    response = getattr(exc, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


def error_message(exc: Exception) -> str:
    response = getattr(exc, "response", None) or {}
    return str(response.get("Error", {}).get("Message", exc))

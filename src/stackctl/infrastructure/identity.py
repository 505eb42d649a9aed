"""Caller identity via STS."""

from __future__ import annotations

from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from stackctl.domain.errors import IdentityUnavailableError
from stackctl.domain.models import Caller

if TYPE_CHECKING:
    from stackctl.infrastructure.aws import SessionProvider


class STSIdentity:
    def __init__(self, session: SessionProvider) -> None:
        self._session = session

    def get(self) -> Caller:
        try:
            resp = self._session.client("sts").get_caller_identity()
        except (BotoCoreError, ClientError) as exc:
            raise IdentityUnavailableError(f"get caller identity: {exc}") from exc
        return Caller(account=resp["Account"], arn=resp.get("Arn", ""), user_id=resp.get("UserId", ""))

"""Fixtures for boto3 adapter tests: real clients wrapped in botocore Stubbers."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import boto3
import pytest
from botocore.stub import Stubber


class StubSession:
    """Stands in for SessionProvider; hands out one stubbed client per service."""

    def __init__(self) -> None:
        self._session = boto3.Session(
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
            region_name="us-west-2",
        )
        self._clients: dict[str, Any] = {}
        self.stubbers: dict[str, Stubber] = {}
        self.regions: list[tuple[str, str | None]] = []

    def stub(self, service: str) -> Stubber:
        if service not in self.stubbers:
            client = self._session.client(service)
            self._clients[service] = client
            stubber = Stubber(client)
            stubber.activate()
            self.stubbers[service] = stubber
        return self.stubbers[service]

    def client(self, service: str, *, region: str | None = None) -> Any:
        self.regions.append((service, region))
        self.stub(service)
        return self._clients[service]


@pytest.fixture
def aws() -> Generator[StubSession]:
    session = StubSession()
    yield session
    for stubber in session.stubbers.values():
        stubber.assert_no_pending_responses()
        stubber.deactivate()

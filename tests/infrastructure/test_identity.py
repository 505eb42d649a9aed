"""Tests for STSIdentity."""

from __future__ import annotations

from typing import Any

import pytest

from stackctl.domain.errors import IdentityUnavailableError
from stackctl.infrastructure.identity import STSIdentity


def test_get_caller(aws: Any) -> None:
    aws.stub("sts").add_response(
        "get_caller_identity",
        {
            "Account": "111111111111",
            "Arn": "arn:aws:iam::111111111111:user/dev",
            "UserId": "AIDAEXAMPLE",
        },
        {},
    )
    caller = STSIdentity(aws).get()
    assert caller.account == "111111111111"
    assert caller.arn.endswith("user/dev")


def test_get_caller_failure(aws: Any) -> None:
    aws.stub("sts").add_client_error("get_caller_identity", service_error_code="ExpiredToken")
    with pytest.raises(IdentityUnavailableError, match="get caller identity"):
        STSIdentity(aws).get()

"""Tests for CloudFormationInventory and ARN parsing."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from stackctl.domain.errors import InventoryUnavailableError
from stackctl.domain.models import Project
from stackctl.infrastructure.inventory import CloudFormationInventory, repository_url_from_arn

PROJECT = Project(name="demo", account_id="111111111111")
STACK_ID = "arn:aws:cloudformation:us-west-2:111111111111:stack/StackSet-demo-infrastructure/abc"


def _stack(outputs: list[dict[str, str]]) -> dict[str, Any]:
    return {
        "StackName": "StackSet-demo-infrastructure",
        "CreationTime": datetime(2020, 1, 1, tzinfo=UTC),
        "StackStatus": "CREATE_COMPLETE",
        "Outputs": outputs,
    }


class TestRepositoryUrlFromArn:
    def test_parses_arn(self) -> None:
        name, url = repository_url_from_arn(
            "arn:aws:ecr:us-west-2:111111111111:repository/demo/frontend"
        )
        assert name == "demo/frontend"
        assert url == "111111111111.dkr.ecr.us-west-2.amazonaws.com/demo/frontend"

    @pytest.mark.parametrize("arn", ["", "not-an-arn", "arn:aws:s3:::bucket/key"])
    def test_rejects_other_arns(self, arn: str) -> None:
        with pytest.raises(ValueError):
            repository_url_from_arn(arn)


class TestCloudFormationInventory:
    def _instances(self, aws: Any, summaries: list[dict[str, Any]]) -> None:
        aws.stub("cloudformation").add_response(
            "list_stack_instances",
            {"Summaries": summaries},
            {
                "StackSetName": "demo-infrastructure",
                "StackInstanceAccount": "111111111111",
                "StackInstanceRegion": "us-west-2",
            },
        )

    def test_repository_urls(self, aws: Any) -> None:
        self._instances(aws, [{"StackId": STACK_ID, "Region": "us-west-2", "Account": "111111111111"}])
        aws.stub("cloudformation").add_response(
            "describe_stacks",
            {
                "Stacks": [
                    _stack(
                        [
                            {
                                "OutputKey": "ECRRepofrontend",
                                "OutputValue": "arn:aws:ecr:us-west-2:111111111111:repository/demo/frontend",
                            },
                            {"OutputKey": "PipelineBucket", "OutputValue": "demo-artifacts"},
                        ]
                    )
                ]
            },
            {"StackName": STACK_ID},
        )

        inventory = CloudFormationInventory(aws).get_resources_by_region(PROJECT, "us-west-2")

        assert inventory.repository_urls == {
            "frontend": "111111111111.dkr.ecr.us-west-2.amazonaws.com/demo/frontend"
        }
        assert ("cloudformation", "us-west-2") in aws.regions

    def test_no_stack_instance(self, aws: Any) -> None:
        self._instances(aws, [])
        inventory = CloudFormationInventory(aws).get_resources_by_region(PROJECT, "us-west-2")
        assert inventory.repository_urls == {}

    def test_missing_stack_set(self, aws: Any) -> None:
        aws.stub("cloudformation").add_client_error(
            "list_stack_instances", service_error_code="StackSetNotFoundException"
        )
        inventory = CloudFormationInventory(aws).get_resources_by_region(PROJECT, "us-west-2")
        assert inventory.repository_urls == {}

    def test_transport_failure(self, aws: Any) -> None:
        aws.stub("cloudformation").add_client_error(
            "list_stack_instances", service_error_code="Throttling"
        )
        with pytest.raises(InventoryUnavailableError):
            CloudFormationInventory(aws).get_resources_by_region(PROJECT, "us-west-2")

"""Read the live stack of a deployed application."""

from __future__ import annotations

from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from stackctl.domain.errors import DescribeError
from stackctl.domain.models import DeployedStack
from stackctl.domain.names import app_stack_name
from stackctl.infrastructure.aws import error_code, error_message

if TYPE_CHECKING:
    from stackctl.domain.models import Environment
    from stackctl.infrastructure.aws import SessionProvider


def _is_stack_missing(exc: ClientError) -> bool:
    return error_code(exc) == "ValidationError" and "does not exist" in error_message(exc)


class CloudFormationDescriber:
    """Describe ``{project}-{env}-{app}`` stacks in each environment's region."""

    def __init__(self, session: SessionProvider) -> None:
        self._session = session

    def describe(
        self,
        project: str,
        env: Environment,
        app_name: str,
        *,
        with_resources: bool = False,
    ) -> DeployedStack | None:
        """Return the deployed stack, or None if it was never deployed to *env*."""
        stack_name = app_stack_name(project, env.name, app_name)
        cfn = self._session.client("cloudformation", region=env.region)
        try:
            stacks = cfn.describe_stacks(StackName=stack_name).get("Stacks", [])
            if not stacks:
                return None
            resources: list[dict[str, str]] = []
            if with_resources:
                paginator = cfn.get_paginator("list_stack_resources")
                for page in paginator.paginate(StackName=stack_name):
                    resources.extend(
                        {
                            "type": r.get("ResourceType", ""),
                            "physical_id": r.get("PhysicalResourceId", ""),
                        }
                        for r in page.get("StackResourceSummaries", [])
                    )
        except ClientError as exc:
            if _is_stack_missing(exc):
                return None
            raise DescribeError(f"describe stack {stack_name}: {exc}", stack=stack_name) from exc
        except BotoCoreError as exc:
            raise DescribeError(f"describe stack {stack_name}: {exc}", stack=stack_name) from exc

        stack = stacks[0]
        return DeployedStack(
            stack_name=stack_name,
            outputs={o["OutputKey"]: o.get("OutputValue", "") for o in stack.get("Outputs", [])},
            parameters={
                p["ParameterKey"]: p.get("ParameterValue", "") for p in stack.get("Parameters", [])
            },
            resources=resources,
        )

"""Per-region project resources, read from the project's stack set.

Each region a project deploys to holds one stack set instance. That
stack exports one ``ECRRepo*`` output per application whose value is the
repository ARN; we turn those into pushable repository URLs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from stackctl.domain.errors import InventoryUnavailableError
from stackctl.domain.models import Project, ResourceInventory
from stackctl.domain.names import project_stack_set_name
from stackctl.infrastructure.aws import error_code

if TYPE_CHECKING:
    from stackctl.infrastructure.aws import SessionProvider

logger = logging.getLogger(__name__)

ECR_REPO_OUTPUT_PREFIX = "ECRRepo"


def repository_url_from_arn(arn: str) -> tuple[str, str]:
    """Split an ECR repository ARN into ``(repository_name, url)``.

    Examples:
        >>> repository_url_from_arn(
        ...     "arn:aws:ecr:us-west-2:111111111111:repository/demo/frontend"
        ... )
        ('demo/frontend', '111111111111.dkr.ecr.us-west-2.amazonaws.com/demo/frontend')
    """
    parts = arn.split(":", 5)
    if len(parts) != 6 or not parts[5].startswith("repository/"):
        msg = f"not an ECR repository ARN: {arn}"
        raise ValueError(msg)
    region, account, resource = parts[3], parts[4], parts[5]
    repo_name = resource.removeprefix("repository/")
    return repo_name, f"{account}.dkr.ecr.{region}.amazonaws.com/{repo_name}"


class CloudFormationInventory:
    """Look up a project's regional resources via CloudFormation."""

    def __init__(self, session: SessionProvider) -> None:
        self._session = session

    def get_resources_by_region(self, project: Project, region: str) -> ResourceInventory:
        stack_set = project_stack_set_name(project.name)
        try:
            stack_id = self._stack_instance_id(stack_set, project.account_id, region)
            if stack_id is None:
                logger.debug("No stack set instance for %s in %s", stack_set, region)
                return ResourceInventory()
            regional = self._session.client("cloudformation", region=region)
            stacks = regional.describe_stacks(StackName=stack_id).get("Stacks", [])
        except (BotoCoreError, ClientError) as exc:
            raise InventoryUnavailableError(
                f"get resources for project {project.name} in region {region}: {exc}",
                project=project.name,
                region=region,
            ) from exc

        urls: dict[str, str] = {}
        for stack in stacks:
            for output in stack.get("Outputs", []):
                if not output.get("OutputKey", "").startswith(ECR_REPO_OUTPUT_PREFIX):
                    continue
                try:
                    repo_name, url = repository_url_from_arn(output["OutputValue"])
                except ValueError as exc:
                    raise InventoryUnavailableError(str(exc), project=project.name) from exc
                app_name = repo_name.removeprefix(f"{project.name}/")
                urls[app_name] = url
        return ResourceInventory(repository_urls=urls)

    def _stack_instance_id(self, stack_set: str, account: str, region: str) -> str | None:
        cfn: Any = self._session.client("cloudformation")
        try:
            resp = cfn.list_stack_instances(
                StackSetName=stack_set,
                StackInstanceAccount=account,
                StackInstanceRegion=region,
            )
        except ClientError as exc:
            if error_code(exc) == "StackSetNotFoundException":
                return None
            raise
        summaries = resp.get("Summaries", [])
        if not summaries:
            return None
        return summaries[0].get("StackId")

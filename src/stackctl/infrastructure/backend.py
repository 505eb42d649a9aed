"""Backend: the collaborator bundle injected into every service.

Commands get one from :attr:`AppContext.backend`; tests build one from
in-memory fakes. Construction never talks to AWS: each adapter creates
its boto3 clients on first use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stackctl.domain.manifest import DEFAULT_LOG_RETENTION_DAYS

if TYPE_CHECKING:
    from stackctl.config.settings import StackctlSettings
    from stackctl.services.contracts import (
        IdentityService,
        InventoryService,
        ProjectDeployer,
        ProjectStore,
        StackDescriber,
        StackRenderer,
        WorkspaceService,
    )


@dataclass
class Backend:
    workspace: WorkspaceService
    store: ProjectStore
    inventory: InventoryService
    identity: IdentityService
    deployer: ProjectDeployer
    describer: StackDescriber
    renderer: StackRenderer
    log_retention_days: int = field(default=DEFAULT_LOG_RETENTION_DAYS)

    @classmethod
    def from_settings(cls, settings: StackctlSettings) -> Backend:
        """Wire the production adapters described by *settings*."""
        from stackctl.infrastructure.aws import SessionProvider
        from stackctl.infrastructure.deployer import CloudFormationDeployer
        from stackctl.infrastructure.describer import CloudFormationDescriber
        from stackctl.infrastructure.identity import STSIdentity
        from stackctl.infrastructure.inventory import CloudFormationInventory
        from stackctl.infrastructure.stack import JinjaStackRenderer
        from stackctl.infrastructure.store import SSMProjectStore
        from stackctl.infrastructure.workspace import Workspace
        from stackctl.services.telemetry import instrument_client

        session = SessionProvider(
            profile=settings.aws.profile,
            region=settings.aws.region,
            on_client=instrument_client if settings.verbose else None,
        )
        return cls(
            workspace=Workspace.discover(
                settings.work_dir,
                directory=settings.workspace.directory,
                summary_file=settings.workspace.summary_file,
            ),
            store=SSMProjectStore(session, prefix=settings.store.parameter_prefix),
            inventory=CloudFormationInventory(session),
            identity=STSIdentity(session),
            deployer=CloudFormationDeployer(session),
            describer=CloudFormationDescriber(session),
            renderer=JinjaStackRenderer(),
            log_retention_days=settings.package.log_retention_days,
        )

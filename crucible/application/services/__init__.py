"""Application services for Crucible of Fate."""

from crucible.application.services.augmentation_gate import (
    AugmentationGate,
    PoolSnapshotSource,
)
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.base import LoggingMixin
from crucible.application.services.crucible_session import CrucibleSession
from crucible.application.services.pool_control_service import PoolControlService
from crucible.application.services.pool_view import PoolViewCache
from crucible.application.services.seeding_coordinator import SeedingCoordinator
from crucible.application.services.state_broadcaster import StateBroadcaster

__all__ = [
    "AugmentationGate",
    "AuthorityGateway",
    "CrucibleSession",
    "LoggingMixin",
    "PoolControlService",
    "PoolSnapshotSource",
    "PoolViewCache",
    "SeedingCoordinator",
    "StateBroadcaster",
]

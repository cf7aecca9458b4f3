"""Builds a fully wired CrucibleSession for one process.

Usage:
    hub = InProcessTransportHub()
    gm = await build_session(
        Actor.authority("gm"),
        hub.connect("gm", authoritative=True),
        roster=roster,
        action_lookup=lookup,
        narrative=sink,
    )
    await gm.start()
"""

from __future__ import annotations

from dotenv import load_dotenv
from structlog import get_logger

from crucible.application.ports.action_classifier import ActionClassifierProtocol
from crucible.application.ports.action_lookup import ActionLookupProtocol
from crucible.application.ports.die_source import DieSourceProtocol
from crucible.application.ports.narrative_sink import NarrativeSinkProtocol
from crucible.application.ports.pool_store import PoolStoreProtocol
from crucible.application.ports.roster import RosterProtocol
from crucible.application.ports.transport_channel import TransportChannelProtocol
from crucible.application.services import (
    AugmentationGate,
    AuthorityGateway,
    CrucibleSession,
    PoolControlService,
    PoolViewCache,
    SeedingCoordinator,
    StateBroadcaster,
)
from crucible.bootstrap.database import get_session_factory
from crucible.bootstrap.logging import configure_logging
from crucible.config import CrucibleConfig
from crucible.domain.models.roles import Actor
from crucible.domain.services.action_classifier import ClassifierChain
from crucible.infrastructure.adapters import SqlPoolStore, SystemDieSource
from crucible.infrastructure.stubs import InMemoryPoolStore

logger = get_logger()


def load_config(dotenv_path: str | None = None) -> CrucibleConfig:
    """Load `.env` (if present), read CrucibleConfig and configure logging."""
    load_dotenv(dotenv_path)
    config = CrucibleConfig.from_environment()
    configure_logging(config)
    return config


async def build_pool_store(config: CrucibleConfig) -> PoolStoreProtocol:
    """SqlPoolStore when a database is configured, else an in-memory store."""
    if not config.uses_database:
        logger.warning("pool_store_in_memory", reason="DATABASE_URL not set")
        return InMemoryPoolStore()
    store = SqlPoolStore(get_session_factory(config.database_url))
    await store.ensure_schema()
    return store


async def build_session(
    actor: Actor,
    channel: TransportChannelProtocol,
    *,
    config: CrucibleConfig | None = None,
    store: PoolStoreProtocol | None = None,
    roster: RosterProtocol | None = None,
    action_lookup: ActionLookupProtocol | None = None,
    narrative: NarrativeSinkProtocol | None = None,
    die_source: DieSourceProtocol | None = None,
    classifier: ActionClassifierProtocol | None = None,
) -> CrucibleSession:
    """Wire every service for `actor`'s process.

    The authoritative process needs a roster, an action lookup and a
    narrative sink. The pool store defaults to the configured one.

    Raises:
        ValueError: If an authoritative session is missing a collaborator.
    """
    config = config or CrucibleConfig.from_environment()
    classifier = classifier or ClassifierChain.default()
    view = PoolViewCache(max_visible_dice=config.max_visible_dice)

    if not actor.is_authoritative:
        return CrucibleSession(
            actor,
            channel,
            view,
            SeedingCoordinator(channel),
            AugmentationGate(classifier, view, channel),
        )

    if roster is None or action_lookup is None or narrative is None:
        raise ValueError(
            "An authoritative session needs roster, action_lookup and narrative"
        )

    store = store or await build_pool_store(config)
    die_source = die_source or SystemDieSource()
    gateway = AuthorityGateway(
        store,
        roster,
        require_entity_ownership=config.require_character_ownership,
    )
    broadcaster = StateBroadcaster(channel, local_view=view)

    return CrucibleSession(
        actor,
        channel,
        view,
        SeedingCoordinator(channel, gateway, broadcaster),
        AugmentationGate(
            classifier,
            gateway,
            channel,
            gateway=gateway,
            broadcaster=broadcaster,
            die_source=die_source,
            narrative=narrative,
            action_lookup=action_lookup,
        ),
        gateway=gateway,
        broadcaster=broadcaster,
        pool_control=PoolControlService(gateway, broadcaster, die_source, narrative),
    )

"""Port interfaces for Crucible of Fate collaborators."""

from crucible.application.ports.action_classifier import ActionClassifierProtocol
from crucible.application.ports.action_lookup import ActionLookupProtocol
from crucible.application.ports.die_source import DieSourceProtocol
from crucible.application.ports.narrative_sink import NarrativeSinkProtocol
from crucible.application.ports.pool_store import PoolStoreListener, PoolStoreProtocol
from crucible.application.ports.roster import RosterProtocol
from crucible.application.ports.transport_channel import (
    EnvelopeHandler,
    TransportChannelProtocol,
)

__all__: list[str] = [
    "ActionClassifierProtocol",
    "ActionLookupProtocol",
    "DieSourceProtocol",
    "EnvelopeHandler",
    "NarrativeSinkProtocol",
    "PoolStoreListener",
    "PoolStoreProtocol",
    "RosterProtocol",
    "TransportChannelProtocol",
]

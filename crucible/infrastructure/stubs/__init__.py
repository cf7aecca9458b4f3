"""Infrastructure stubs for development and testing.

Available stubs:
- InMemoryPoolStore: dict-backed pool record with failure injection
- RosterStub: connected participants with optional entity ownership
- DieSourceStub: scripted d6 rolls
- NarrativeSinkStub: records posted narrative messages
- ActionLookupStub: resolves registered actions by id

WARNING: These stubs are NOT for production use.
Production implementations are in crucible/infrastructure/adapters/.
"""

from crucible.infrastructure.stubs.action_lookup_stub import ActionLookupStub
from crucible.infrastructure.stubs.die_source_stub import DieSourceStub
from crucible.infrastructure.stubs.narrative_sink_stub import NarrativeSinkStub
from crucible.infrastructure.stubs.pool_store_stub import InMemoryPoolStore
from crucible.infrastructure.stubs.roster_stub import RosterStub

__all__ = [
    "ActionLookupStub",
    "DieSourceStub",
    "InMemoryPoolStore",
    "NarrativeSinkStub",
    "RosterStub",
]

"""Authority gateway: the single writer of PoolState.

Every committed change to the pool record goes through this class, in the
authoritative process only. A write is:

    read committed state -> build delta from it -> merge
        -> rebalance (unless override or suspended) -> persist whole record

inside one asyncio.Lock critical section, so a validation made against
the live state cannot be invalidated by another write from this process
before the commit lands.

The seeding ritual suspends the rebalance step for its whole duration,
so no write made while it runs (seed, transfer, augmentation, arbiter
die) snaps the total to a roster it is still building towards.

Broadcasting is not done here; callers publish the returned state through
StateBroadcaster once they are done.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from crucible.application.ports.pool_store import PoolStoreProtocol
from crucible.application.ports.roster import RosterProtocol
from crucible.application.services.base import LoggingMixin
from crucible.domain.models.pool_state import REQUIRE_OWNERSHIP_KEY, PoolDelta, PoolState
from crucible.domain.models.roles import Actor, require_authoritative
from crucible.domain.services import invariant_enforcer

DeltaBuilder = Callable[[PoolState], PoolDelta]


class AuthorityGateway(LoggingMixin):
    """Validates, applies and persists proposed pool changes.

    Attributes:
        require_entity_ownership: Whether only participants owning a game
            entity count toward the invariant total.
    """

    def __init__(
        self,
        store: PoolStoreProtocol,
        roster: RosterProtocol,
        *,
        require_entity_ownership: bool = False,
    ) -> None:
        self._store = store
        self._roster = roster
        self._require_entity_ownership = require_entity_ownership
        self._rebalance_suspended = False
        self._lock = asyncio.Lock()
        self._init_logger()

    @property
    def require_entity_ownership(self) -> bool:
        return self._require_entity_ownership

    @property
    def rebalance_suspended(self) -> bool:
        return self._rebalance_suspended

    def set_rebalance_suspended(self, suspended: bool) -> None:
        """Turn the rebalance step off (ritual running) or back on."""
        self._rebalance_suspended = suspended
        self._log_operation("set_rebalance_suspended").debug(
            "rebalance_suspension_changed", suspended=suspended
        )

    async def load_settings(self) -> None:
        """Read the persisted ownership flag, keeping the configured value as default."""
        self._require_entity_ownership = await self._store.read_flag(
            REQUIRE_OWNERSHIP_KEY, self._require_entity_ownership
        )
        self._log_operation("load_settings").debug(
            "settings_loaded",
            require_entity_ownership=self._require_entity_ownership,
        )

    async def snapshot(self) -> PoolState:
        """Return the committed state."""
        return await self._store.load()

    async def list_active_participants(self) -> frozenset[str]:
        return await self._roster.list_active_participants(
            require_entity_ownership=self._require_entity_ownership
        )

    async def active_participant_count(self) -> int:
        return len(await self.list_active_participants())

    async def propose_update(
        self,
        actor: Actor,
        delta: PoolDelta,
        *,
        rebalance: bool = True,
    ) -> PoolState:
        """Merge `delta` onto the committed state and persist the result.

        Args:
            actor: Caller; must be authoritative.
            delta: Fields to change.
            rebalance: When False the pool counts are written exactly as
                merged, even with override disabled (seeding, reset).

        Returns:
            The persisted state.

        Raises:
            AuthorityError: If actor is not authoritative.
        """
        return await self.transact(
            actor, lambda _current: delta, rebalance=rebalance, operation="propose_update"
        )

    async def transact(
        self,
        actor: Actor,
        build_delta: DeltaBuilder,
        *,
        rebalance: bool = True,
        operation: str = "transact",
    ) -> PoolState:
        """Run a read-validate-write cycle against the live state.

        `build_delta` receives the committed state and returns the delta
        to apply. Any exception it raises aborts the write and propagates;
        PoolState is left untouched.

        Raises:
            AuthorityError: If actor is not authoritative.
        """
        require_authoritative(actor, operation)
        log = self._log_operation(operation, actor_id=actor.participant_id)

        async with self._lock:
            current = await self._store.load()
            delta = build_delta(current)
            apply_rebalance = rebalance and not self._rebalance_suspended
            if delta.is_empty and not apply_rebalance:
                log.debug("pool_state_unchanged", total=current.total)
                return current

            merged = current.merge(delta)
            if apply_rebalance:
                target = await self.active_participant_count()
                if not invariant_enforcer.is_balanced(merged, target):
                    merged = invariant_enforcer.rebalance(merged, target)

            if merged == current:
                log.debug("pool_state_unchanged", total=current.total)
                return current

            await self._store.save(merged)

        log.info(
            "pool_state_committed",
            player_before=current.player_pool_count,
            arbiter_before=current.arbiter_pool_count,
            player_after=merged.player_pool_count,
            arbiter_after=merged.arbiter_pool_count,
            override_enabled=merged.override_enabled,
            override_changed=delta.touches_override,
            rebalanced=apply_rebalance and not merged.override_enabled,
        )
        return merged

    async def enforce_invariant_now(self, actor: Actor) -> PoolState:
        """Rebalance against the current roster.

        No-op while override is on or the rebalance step is suspended.

        Raises:
            AuthorityError: If actor is not authoritative.
        """
        return await self.transact(
            actor, lambda _current: PoolDelta(), operation="enforce_invariant_now"
        )

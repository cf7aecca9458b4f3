"""Direct authoritative pool actions: transfers, override, reset, arbiter die.

Every action here is authoritative-only, is committed through the
AuthorityGateway and is followed by a stateUpdate broadcast.

Transfers are accepted whether the invariant is enforced or suspended:
a transfer preserves the total, so the rebalance step leaves it intact.
"""

from __future__ import annotations

from crucible.application.ports.die_source import DieSourceProtocol
from crucible.application.ports.narrative_sink import NarrativeSinkProtocol
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.base import LoggingMixin
from crucible.application.services.state_broadcaster import StateBroadcaster
from crucible.domain.errors.augmentation import InsufficientDiceError
from crucible.domain.models.pool_state import PoolDelta, PoolState
from crucible.domain.models.roles import Actor, require_authoritative
from crucible.domain.models.transfer import (
    TransferDirection,
    single_die_delta,
    transfer_delta,
)


class PoolControlService(LoggingMixin):
    """Arbiter controls over the pools."""

    def __init__(
        self,
        gateway: AuthorityGateway,
        broadcaster: StateBroadcaster,
        die_source: DieSourceProtocol,
        narrative: NarrativeSinkProtocol,
    ) -> None:
        self._gateway = gateway
        self._broadcaster = broadcaster
        self._die_source = die_source
        self._narrative = narrative
        self._init_logger()

    async def move_dice(
        self, actor: Actor, direction: TransferDirection, amount: int
    ) -> PoolState:
        """Move `amount` dice between the pools.

        Raises:
            AuthorityError: If actor is not authoritative.
            ValidationError: If amount is not positive or exceeds the live
                source pool. Pool counts are unchanged.
        """
        log = self._log_operation(
            "move_dice", direction=direction.value, amount=amount
        )
        state = await self._gateway.transact(
            actor,
            lambda current: transfer_delta(current, direction, amount),
            operation="move_dice",
        )
        await self._broadcaster.broadcast_state(state)
        log.info(
            "dice_moved",
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )
        return state

    async def set_override(self, actor: Actor, enabled: bool) -> PoolState:
        """Suspend or restore the total-dice invariant.

        Disabling the override snaps the pools back to the invariant at once.
        """
        log = self._log_operation("set_override", enabled=enabled)
        state = await self._gateway.propose_update(
            actor, PoolDelta(override_enabled=enabled), rebalance=False
        )
        if not enabled:
            state = await self._gateway.enforce_invariant_now(actor)
        await self._broadcaster.broadcast_state(state)
        log.info("override_set", total=state.total)
        return state

    async def toggle_override(self, actor: Actor) -> PoolState:
        require_authoritative(actor, "toggle_override")
        current = await self._gateway.snapshot()
        return await self.set_override(actor, not current.override_enabled)

    async def reset_pools(self, actor: Actor) -> PoolState:
        """Set both pools to zero, regardless of override."""
        state = await self._gateway.propose_update(
            actor,
            PoolDelta(player_pool_count=0, arbiter_pool_count=0),
            rebalance=False,
        )
        await self._broadcaster.broadcast_state(state)
        self._log_operation("reset_pools").info("pools_reset")
        return state

    async def roll_arbiter_die(self, actor: Actor) -> int:
        """Spend one arbiter die: roll it, announce it, hand it to the players.

        Returns:
            The die value.

        Raises:
            AuthorityError: If actor is not authoritative.
            InsufficientDiceError: If the arbiter pool is empty.
        """
        require_authoritative(actor, "roll_arbiter_die")
        log = self._log_operation("roll_arbiter_die")

        current = await self._gateway.snapshot()
        if current.arbiter_pool_count < 1:
            raise InsufficientDiceError("arbiter", 1, current.arbiter_pool_count)

        value = await self._die_source.roll_d6()
        state = await self._gateway.transact(
            actor,
            lambda live: single_die_delta(live, TransferDirection.TO_PLAYER),
            operation="roll_arbiter_die",
        )
        await self._broadcaster.broadcast_state(state)
        await self._narrative.post_message(f"The arbiter spends a Crucible die: {value}")
        log.info("arbiter_die_rolled", die_value=value)
        return value

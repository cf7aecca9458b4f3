"""Unit tests for PoolControlService (transfers, override, reset, arbiter die)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from crucible.application.dtos.envelope import StateUpdateEnvelope
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.pool_control_service import PoolControlService
from crucible.application.services.state_broadcaster import StateBroadcaster
from crucible.domain.errors import AuthorityError, InsufficientDiceError, ValidationError
from crucible.domain.models.pool_state import PoolState
from crucible.domain.models.roles import Actor
from crucible.domain.models.transfer import TransferDirection
from crucible.infrastructure.stubs import (
    DieSourceStub,
    InMemoryPoolStore,
    NarrativeSinkStub,
    RosterStub,
)


@pytest.fixture
def channel() -> AsyncMock:
    """Mock transport channel recording published envelopes."""
    return AsyncMock()


@pytest.fixture
def seeded_store() -> InMemoryPoolStore:
    """Store holding {player: 3, arbiter: 1}."""
    return InMemoryPoolStore(PoolState(player_pool_count=3, arbiter_pool_count=1))


@pytest.fixture
def four_player_roster() -> RosterStub:
    """Four active participants, so {3, 1} is balanced."""
    return RosterStub(["alice", "bob", "carol", "dave"])


@pytest.fixture
def service(
    seeded_store: InMemoryPoolStore,
    four_player_roster: RosterStub,
    channel: AsyncMock,
    die_source: DieSourceStub,
    narrative: NarrativeSinkStub,
) -> PoolControlService:
    """PoolControlService wired to stubs."""
    gateway = AuthorityGateway(seeded_store, four_player_roster)
    return PoolControlService(gateway, StateBroadcaster(channel), die_source, narrative)


def _published_states(channel: AsyncMock) -> list[PoolState]:
    return [
        call.args[0].payload.to_state()
        for call in channel.publish.await_args_list
        if isinstance(call.args[0], StateUpdateEnvelope)
    ]


class TestMoveDice:
    """Tests for move_dice()."""

    @pytest.mark.asyncio
    async def test_move_two_to_arbiter(
        self, service: PoolControlService, channel: AsyncMock, gm: Actor
    ) -> None:
        """{3, 1} -> move 2 to arbiter -> {1, 3}, broadcast."""
        state = await service.move_dice(gm, TransferDirection.TO_ARBITER, 2)

        assert (state.player_pool_count, state.arbiter_pool_count) == (1, 3)
        assert _published_states(channel) == [state]

    @pytest.mark.asyncio
    async def test_over_transfer_rejected_and_state_unchanged(
        self,
        service: PoolControlService,
        seeded_store: InMemoryPoolStore,
        channel: AsyncMock,
        gm: Actor,
    ) -> None:
        """Moving 5 from a pool of 3 fails and nothing changes."""
        with pytest.raises(ValidationError):
            await service.move_dice(gm, TransferDirection.TO_ARBITER, 5)

        state = await seeded_store.load()
        assert (state.player_pool_count, state.arbiter_pool_count) == (3, 1)
        channel.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_move_to_player(self, service: PoolControlService, gm: Actor) -> None:
        state = await service.move_dice(gm, TransferDirection.TO_PLAYER, 1)

        assert (state.player_pool_count, state.arbiter_pool_count) == (4, 0)

    @pytest.mark.asyncio
    async def test_participant_cannot_move(
        self, service: PoolControlService, alice: Actor
    ) -> None:
        with pytest.raises(AuthorityError):
            await service.move_dice(alice, TransferDirection.TO_ARBITER, 1)

    @pytest.mark.asyncio
    async def test_move_allowed_with_override_enabled(
        self, service: PoolControlService, gm: Actor
    ) -> None:
        await service.set_override(gm, True)

        state = await service.move_dice(gm, TransferDirection.TO_ARBITER, 3)

        assert (state.player_pool_count, state.arbiter_pool_count) == (0, 4)


class TestOverride:
    """Tests for set_override() and toggle_override()."""

    @pytest.mark.asyncio
    async def test_enabling_override_leaves_counts(
        self, service: PoolControlService, gm: Actor
    ) -> None:
        state = await service.set_override(gm, True)

        assert state.override_enabled is True
        assert (state.player_pool_count, state.arbiter_pool_count) == (3, 1)

    @pytest.mark.asyncio
    async def test_disabling_override_snaps_back(
        self,
        service: PoolControlService,
        four_player_roster: RosterStub,
        gm: Actor,
    ) -> None:
        """Roster shrank while override was on; disabling rebalances at once."""
        await service.set_override(gm, True)
        four_player_roster.disconnect("dave")
        four_player_roster.disconnect("carol")

        state = await service.set_override(gm, False)

        assert state.override_enabled is False
        assert (state.player_pool_count, state.arbiter_pool_count) == (1, 1)

    @pytest.mark.asyncio
    async def test_toggle_flips_flag(self, service: PoolControlService, gm: Actor) -> None:
        first = await service.toggle_override(gm)
        second = await service.toggle_override(gm)

        assert first.override_enabled is True
        assert second.override_enabled is False

    @pytest.mark.asyncio
    async def test_participant_cannot_toggle(
        self, service: PoolControlService, alice: Actor
    ) -> None:
        with pytest.raises(AuthorityError):
            await service.toggle_override(alice)


class TestResetPools:
    """Tests for reset_pools()."""

    @pytest.mark.asyncio
    async def test_reset_zeroes_both_pools_with_override_off(
        self, service: PoolControlService, gm: Actor
    ) -> None:
        state = await service.reset_pools(gm)

        assert state.total == 0
        assert state.override_enabled is False


class TestRollArbiterDie:
    """Tests for roll_arbiter_die()."""

    @pytest.mark.asyncio
    async def test_roll_moves_die_to_players_and_announces(
        self,
        service: PoolControlService,
        die_source: DieSourceStub,
        narrative: NarrativeSinkStub,
        channel: AsyncMock,
        gm: Actor,
    ) -> None:
        die_source.queue(5)

        value = await service.roll_arbiter_die(gm)

        assert value == 5
        state = _published_states(channel)[-1]
        assert (state.player_pool_count, state.arbiter_pool_count) == (4, 0)
        assert narrative.messages == [(None, "The arbiter spends a Crucible die: 5")]

    @pytest.mark.asyncio
    async def test_empty_arbiter_pool_is_insufficient(
        self, service: PoolControlService, die_source: DieSourceStub, gm: Actor
    ) -> None:
        await service.move_dice(gm, TransferDirection.TO_PLAYER, 1)

        with pytest.raises(InsufficientDiceError) as exc_info:
            await service.roll_arbiter_die(gm)

        assert exc_info.value.pool == "arbiter"
        assert die_source.rolls == []

    @pytest.mark.asyncio
    async def test_state_broadcast_even_if_announcement_fails(
        self,
        seeded_store: InMemoryPoolStore,
        four_player_roster: RosterStub,
        channel: AsyncMock,
        die_source: DieSourceStub,
        gm: Actor,
    ) -> None:
        narrative = AsyncMock()
        narrative.post_message.side_effect = RuntimeError("chat unavailable")
        service = PoolControlService(
            AuthorityGateway(seeded_store, four_player_roster),
            StateBroadcaster(channel),
            die_source,
            narrative,
        )

        with pytest.raises(RuntimeError):
            await service.roll_arbiter_die(gm)

        assert _published_states(channel) == [await seeded_store.load()]
        assert (await seeded_store.load()).arbiter_pool_count == 0

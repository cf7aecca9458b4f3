"""Unit tests for AuthorityGateway.

Covers role checks, rebalancing after every write, override suspension,
and the read-validate-write critical section.
"""

from __future__ import annotations

import asyncio

import pytest

from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.domain.errors import AuthorityError, ValidationError
from crucible.domain.models.pool_state import REQUIRE_OWNERSHIP_KEY, PoolDelta, PoolState
from crucible.domain.models.roles import Actor
from crucible.domain.models.transfer import TransferDirection, transfer_delta
from crucible.infrastructure.stubs import InMemoryPoolStore, RosterStub


@pytest.fixture
def gateway(store: InMemoryPoolStore, roster: RosterStub) -> AuthorityGateway:
    """Gateway over an empty store and a three-participant roster."""
    return AuthorityGateway(store, roster)


class TestRoleCheck:
    """Only the authoritative role may write."""

    @pytest.mark.asyncio
    async def test_participant_cannot_propose(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, alice: Actor
    ) -> None:
        with pytest.raises(AuthorityError):
            await gateway.propose_update(alice, PoolDelta(player_pool_count=2))

        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_participant_cannot_enforce_invariant(
        self, gateway: AuthorityGateway, alice: Actor
    ) -> None:
        with pytest.raises(AuthorityError):
            await gateway.enforce_invariant_now(alice)


class TestProposeUpdate:
    """Tests for propose_update()."""

    @pytest.mark.asyncio
    async def test_merged_state_rebalanced_to_roster(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        """With override off the total snaps to the active participant count."""
        state = await gateway.propose_update(gm, PoolDelta(player_pool_count=5))

        assert (state.player_pool_count, state.arbiter_pool_count) == (3, 0)
        assert await store.load() == state

    @pytest.mark.asyncio
    async def test_explicit_write_skips_rebalance(
        self, gateway: AuthorityGateway, gm: Actor
    ) -> None:
        state = await gateway.propose_update(
            gm, PoolDelta(player_pool_count=5, arbiter_pool_count=4), rebalance=False
        )

        assert (state.player_pool_count, state.arbiter_pool_count) == (5, 4)

    @pytest.mark.asyncio
    async def test_unchanged_state_is_not_rewritten(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        await gateway.propose_update(gm, PoolDelta(player_pool_count=3))
        saves = store.save_count

        await gateway.propose_update(gm, PoolDelta(player_pool_count=3))

        assert store.save_count == saves

    @pytest.mark.asyncio
    async def test_failed_save_leaves_state_untouched(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        store.set_failure(RuntimeError("disk full"))

        with pytest.raises(RuntimeError):
            await gateway.propose_update(gm, PoolDelta(player_pool_count=3))

        assert await store.load() == PoolState()


class TestOverrideSuspension:
    """While override is on the invariant is never auto-applied."""

    @pytest.mark.asyncio
    async def test_no_rebalance_while_override_enabled(
        self, gateway: AuthorityGateway, gm: Actor
    ) -> None:
        state = await gateway.propose_update(
            gm, PoolDelta(override_enabled=True, player_pool_count=7)
        )

        assert state.player_pool_count == 7
        assert state.total != await gateway.active_participant_count()

    @pytest.mark.asyncio
    async def test_disabling_override_restores_invariant(
        self, gateway: AuthorityGateway, gm: Actor
    ) -> None:
        await gateway.propose_update(
            gm, PoolDelta(override_enabled=True, player_pool_count=7, arbiter_pool_count=2)
        )

        state = await gateway.propose_update(gm, PoolDelta(override_enabled=False))

        assert state.total == 3
        assert state.arbiter_pool_count == 2

    @pytest.mark.asyncio
    async def test_enforce_invariant_is_noop_under_override(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        await gateway.propose_update(
            gm, PoolDelta(override_enabled=True, player_pool_count=9)
        )

        state = await gateway.enforce_invariant_now(gm)

        assert state.player_pool_count == 9


class TestTransact:
    """Tests for transact()."""

    @pytest.mark.asyncio
    async def test_builder_error_aborts_write(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        await gateway.propose_update(
            gm, PoolDelta(player_pool_count=3, arbiter_pool_count=0)
        )
        before = await store.load()

        with pytest.raises(ValidationError):
            await gateway.transact(
                gm, lambda current: transfer_delta(current, TransferDirection.TO_ARBITER, 5)
            )

        assert await store.load() == before

    @pytest.mark.asyncio
    async def test_concurrent_transfers_validate_against_live_state(
        self, gateway: AuthorityGateway, gm: Actor
    ) -> None:
        """Two transfers of 2 from a pool of 3: exactly one succeeds."""
        await gateway.propose_update(gm, PoolDelta(player_pool_count=3))

        def move_two(current: PoolState) -> PoolDelta:
            return transfer_delta(current, TransferDirection.TO_ARBITER, 2)

        results = await asyncio.gather(
            gateway.transact(gm, move_two),
            gateway.transact(gm, move_two),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, ValidationError)]
        successes = [r for r in results if isinstance(r, PoolState)]
        assert len(failures) == 1
        assert len(successes) == 1
        assert (successes[0].player_pool_count, successes[0].arbiter_pool_count) == (1, 2)


class TestSettings:
    """Tests for the roster ownership filter."""

    @pytest.mark.asyncio
    async def test_persisted_flag_overrides_configured_default(self) -> None:
        store = InMemoryPoolStore(flags={REQUIRE_OWNERSHIP_KEY: True})
        roster = RosterStub(["alice", "bob", "carol"], owners=["alice"])
        gateway = AuthorityGateway(store, roster, require_entity_ownership=False)

        await gateway.load_settings()

        assert gateway.require_entity_ownership is True
        assert await gateway.active_participant_count() == 1

    @pytest.mark.asyncio
    async def test_configured_default_used_when_not_persisted(self) -> None:
        roster = RosterStub(["alice", "bob"], owners=["bob"])
        gateway = AuthorityGateway(
            InMemoryPoolStore(), roster, require_entity_ownership=True
        )

        await gateway.load_settings()

        assert await gateway.list_active_participants() == frozenset({"bob"})


class TestRebalanceSuspension:
    """While suspended (seeding ritual) no write rebalances."""

    @pytest.mark.asyncio
    async def test_suspended_write_keeps_counts(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        gateway.set_rebalance_suspended(True)

        state = await gateway.propose_update(gm, PoolDelta(player_pool_count=1))

        assert (state.player_pool_count, state.arbiter_pool_count) == (1, 0)
        assert await store.load() == state

    @pytest.mark.asyncio
    async def test_enforce_is_noop_while_suspended(
        self, gateway: AuthorityGateway, store: InMemoryPoolStore, gm: Actor
    ) -> None:
        gateway.set_rebalance_suspended(True)

        state = await gateway.enforce_invariant_now(gm)

        assert state.total == 0
        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_lifting_suspension_restores_enforcement(
        self, gateway: AuthorityGateway, gm: Actor
    ) -> None:
        gateway.set_rebalance_suspended(True)
        await gateway.propose_update(gm, PoolDelta(arbiter_pool_count=1))
        gateway.set_rebalance_suspended(False)

        state = await gateway.enforce_invariant_now(gm)

        assert gateway.rebalance_suspended is False
        assert state.total == 3

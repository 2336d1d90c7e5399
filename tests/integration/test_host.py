# [TESTER] v1

from __future__ import annotations

import pytest

from tokenswap.core import LiquidityPoolContract, PoolClient, TokenClient, TokenContract
from tokenswap.core.errors import (
    InvariantViolation,
    PoolEmpty,
    ReentrancyError,
    SlippageExceeded,
    ValidationError,
    describe_error,
)
from tokenswap.integration import AllowAllAuthorizer, ContractEvent, Host, HostConfig
from tokenswap.integration.host import derive_contract_address

ADMIN = "G" + "A" * 55
ALICE = "G" + "B" * 55
BOB = "G" + "C" * 55


class CallbackToken(TokenContract):
    """Token that runs a hook after each transfer_from (a hostile or buggy token)."""

    hook = None

    def transfer_from(self, spender, from_, to, amount):
        super().transfer_from(spender, from_, to, amount)
        hook, self.hook = self.hook, None
        if hook is not None:
            hook()


class LeakyMintToken(TokenContract):
    """Mints without growing the supply, breaking supply == sum(balances)."""

    def mint(self, to, amount):
        self.env.require_auth(self.admin())
        balances = self.state.balances
        balances.set(to, balances.get(to) + amount)


def _setup(config: HostConfig | None = None, token_factory=TokenContract):
    host = Host(config, authorizer=AllowAllAuthorizer())
    token_a = TokenClient(host, host.deploy(token_factory).address)
    token_b = TokenClient(host, host.deploy(TokenContract).address)
    pool = PoolClient(host, host.deploy(LiquidityPoolContract).address)
    token_a.initialize(ADMIN, 7, "Token A", "TKA")
    token_b.initialize(ADMIN, 7, "Token B", "TKB")
    pool.initialize(ADMIN, token_a.address, token_b.address, 30)
    for user in (ALICE, BOB):
        for token in (token_a, token_b):
            token.mint(user, 100_000)
            token.approve(user, pool.address, 100_000, host.sequence + 100)
    return host, token_a, token_b, pool


def test_deploy_assigns_deterministic_addresses() -> None:
    host = Host()
    first = host.deploy(TokenContract)
    second = host.deploy(TokenContract)
    assert first.address == derive_contract_address("TokenContract", 0)
    assert second.address == derive_contract_address("TokenContract", 1)
    assert host.contract(first.address) is first
    with pytest.raises(ValueError):
        host.deploy(TokenContract, address=first.address)
    with pytest.raises(ValidationError):
        host.contract("missing")


def test_default_authorizer_denies() -> None:
    host = Host()
    token = TokenClient(host, host.deploy(TokenContract).address)
    token.initialize(ADMIN, 7, "Token A", "TKA")
    with pytest.raises(Exception) as exc_info:
        token.mint(ALICE, 1)
    assert describe_error(exc_info.value)[0] == "unauthorized"


def test_only_exported_functions_are_invocable() -> None:
    host, token_a, _, pool = _setup()
    with pytest.raises(ValidationError):
        host.invoke(token_a.address, "_move", ALICE, BOB, 1)
    with pytest.raises(ValidationError):
        host.invoke(pool.address, "get_reserves")
    with pytest.raises(ValidationError):
        host.view(pool.address, "swap_a_for_b", ALICE, 1, 0)


def test_failed_invocation_drops_its_events() -> None:
    host, _, _, pool = _setup()
    pool.add_liquidity(ALICE, 10_000, 10_000, 0)
    count = len(host.events())
    with pytest.raises(SlippageExceeded):
        pool.swap_a_for_b(BOB, 1_000, 10_000)
    assert len(host.events()) == count


def test_event_filters() -> None:
    host, token_a, token_b, pool = _setup()
    host.advance_sequence(10)
    start = host.sequence
    pool.add_liquidity(ALICE, 10_000, 10_000, 0)

    recent = host.events(start_sequence=start)
    assert [ev.topics[0] for ev in recent] == ["transfer", "transfer", "add_liq"]
    assert [ev.contract for ev in recent] == [token_a.address, token_b.address, pool.address]
    assert all(isinstance(ev, ContractEvent) and ev.sequence == start for ev in recent)
    assert len(host.events(contract=token_a.address, topic="mint")) == 2


def test_simulate_returns_result_and_discards_effects() -> None:
    host, token_a, token_b, pool = _setup()
    pool.add_liquidity(ALICE, 10_000, 10_000, 0)
    events_before = len(host.events())

    assert host.simulate(pool.address, "swap_a_for_b", BOB, 1_000, 0) == 906
    assert pool.get_reserves() == (10_000, 10_000)
    assert token_a.balance(BOB) == 100_000
    assert token_b.balance(BOB) == 100_000
    assert len(host.events()) == events_before

    with pytest.raises(SlippageExceeded):
        host.simulate(pool.address, "swap_a_for_b", BOB, 1_000, 907)


def test_advance_sequence_only_moves_forward() -> None:
    host = Host(HostConfig(initial_sequence=50))
    assert host.sequence == 50
    assert host.advance_sequence(5) == 55
    with pytest.raises(ValueError):
        host.advance_sequence(-1)


def test_reentrant_call_is_rejected_and_rolled_back() -> None:
    host, token_a, token_b, pool = _setup(token_factory=CallbackToken)
    hostile = host.contract(token_a.address)
    hostile.hook = lambda: pool.swap_a_for_b(BOB, 10, 0)

    with pytest.raises(ReentrancyError):
        pool.add_liquidity(ALICE, 10_000, 10_000, 0)

    assert pool.get_reserves() == (0, 0)
    assert pool.total_shares() == 0
    assert token_a.balance(ALICE) == 100_000
    assert token_a.balance(pool.address) == 0


def test_reentrancy_window_is_observable_without_guard() -> None:
    # Token A is pulled before reserves are booked, so a callback at that
    # point still sees an empty pool.
    host, token_a, token_b, pool = _setup(HostConfig(reentrancy_guard=False), token_factory=CallbackToken)
    hostile = host.contract(token_a.address)
    hostile.hook = lambda: pool.swap_a_for_b(BOB, 10, 0)

    with pytest.raises(PoolEmpty):
        pool.add_liquidity(ALICE, 10_000, 10_000, 0)
    assert pool.total_shares() == 0


def test_reentrant_deposit_without_guard_keeps_share_accounting() -> None:
    host, token_a, token_b, pool = _setup(HostConfig(reentrancy_guard=False), token_factory=CallbackToken)
    hostile = host.contract(token_a.address)
    hostile.hook = lambda: pool.add_liquidity(BOB, 100, 400, 0)

    assert pool.add_liquidity(ALICE, 100, 400, 0) == 200
    assert pool.get_shares(BOB) == 200
    assert pool.get_shares(ALICE) == 200
    assert pool.total_shares() == 400
    assert pool.get_reserves() == (200, 800)
    assert host.contract(pool.address).verify_invariants() == []


def test_invariant_check_rolls_back_inconsistent_commit() -> None:
    host = Host(HostConfig(check_invariants=True), authorizer=AllowAllAuthorizer())
    token = TokenClient(host, host.deploy(LeakyMintToken).address)
    token.initialize(ADMIN, 7, "Leaky", "LKY")

    with pytest.raises(InvariantViolation) as exc_info:
        token.mint(ALICE, 10)
    assert exc_info.value.violations == [f"{token.address}:supply_equals_balances"]
    assert token.balance(ALICE) == 0


def test_describe_error_for_foreign_exceptions() -> None:
    code, message = describe_error(KeyError("x"))
    assert code == "unknown"
    assert message
    assert describe_error(PoolEmpty("x")) == (
        "pool_empty",
        "The liquidity pool has no funds. Please add liquidity first.",
    )

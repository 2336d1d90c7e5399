# [TESTER] v1

from __future__ import annotations

import pytest

from tokenswap.core import TokenClient, TokenContract
from tokenswap.core.errors import (
    AlreadyInitialized,
    AmountOverflowError,
    AuthorizationError,
    ExpirationNotInFuture,
    InsufficientAllowance,
    InsufficientBalance,
    NonPositiveAmount,
    NotInitialized,
    ValidationError,
)
from tokenswap.integration import AllowAllAuthorizer, Host, StaticAuthorizer
from tokenswap.state.balances import I128_MAX

ADMIN = "G" + "A" * 55
ALICE = "G" + "B" * 55
BOB = "G" + "C" * 55


def _token(authorizer=None) -> tuple[Host, TokenClient]:
    host = Host(authorizer=authorizer or AllowAllAuthorizer())
    contract = host.deploy(TokenContract)
    token = TokenClient(host, contract.address)
    token.initialize(ADMIN, 7, "Token A", "TKA")
    return host, token


def _supply_matches(host: Host, token: TokenClient) -> bool:
    return host.contract(token.address).verify_invariants() == []


def test_initialize_sets_metadata_and_zero_supply() -> None:
    _, token = _token()
    assert token.admin() == ADMIN
    assert token.name() == "Token A"
    assert token.symbol() == "TKA"
    assert token.decimals() == 7
    assert token.total_supply() == 0


def test_initialize_twice_fails() -> None:
    _, token = _token()
    with pytest.raises(AlreadyInitialized):
        token.initialize(ALICE, 2, "Other", "OTH")
    assert token.admin() == ADMIN
    assert token.name() == "Token A"


def test_uninitialized_defaults() -> None:
    host = Host(authorizer=AllowAllAuthorizer())
    token = TokenClient(host, host.deploy(TokenContract).address)
    assert token.decimals() == 7
    assert token.name() == "Stellar Swap Token"
    assert token.symbol() == "SST"
    assert token.total_supply() == 0
    assert token.balance(ALICE) == 0
    with pytest.raises(NotInitialized):
        token.admin()
    with pytest.raises(NotInitialized):
        token.mint(ALICE, 10)


def test_mint_increases_balance_and_supply() -> None:
    host, token = _token()
    token.mint(ALICE, 1_000)
    token.mint(BOB, 250)
    assert token.balance(ALICE) == 1_000
    assert token.balance(BOB) == 250
    assert token.total_supply() == 1_250
    assert _supply_matches(host, token)

    (ev,) = [e for e in host.events(topic="mint") if e.topics[1] == BOB]
    assert ev.data == 250
    assert ev.contract == token.address


@pytest.mark.parametrize("amount", [0, -5])
def test_mint_rejects_non_positive(amount: int) -> None:
    _, token = _token()
    with pytest.raises(NonPositiveAmount):
        token.mint(ALICE, amount)
    assert token.total_supply() == 0


def test_mint_rejects_non_int_amounts() -> None:
    _, token = _token()
    with pytest.raises(ValidationError):
        token.mint(ALICE, True)
    with pytest.raises(ValidationError):
        token.mint(ALICE, 1.5)


def test_mint_requires_admin_authorization() -> None:
    _, token = _token(StaticAuthorizer([ALICE]))
    with pytest.raises(AuthorizationError):
        token.mint(ALICE, 10)
    assert token.balance(ALICE) == 0


def test_mint_overflow_rolls_back() -> None:
    host, token = _token()
    token.mint(ALICE, I128_MAX)
    with pytest.raises(AmountOverflowError):
        token.mint(BOB, 1)
    assert token.balance(BOB) == 0
    assert token.total_supply() == I128_MAX
    assert _supply_matches(host, token)


def test_burn_reduces_balance_and_supply() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    token.burn(ALICE, 40)
    assert token.balance(ALICE) == 60
    assert token.total_supply() == 60
    assert [e.data for e in host.events(topic="burn")] == [40]


def test_burn_insufficient_balance() -> None:
    _, token = _token()
    token.mint(ALICE, 10)
    with pytest.raises(InsufficientBalance):
        token.burn(ALICE, 11)
    with pytest.raises(NonPositiveAmount):
        token.burn(ALICE, 0)
    assert token.balance(ALICE) == 10
    assert token.total_supply() == 10


def test_burn_requires_owner_authorization() -> None:
    _, token = _token(StaticAuthorizer([ADMIN, BOB]))
    token.mint(ALICE, 10)
    with pytest.raises(AuthorizationError):
        token.burn(ALICE, 5)
    assert token.balance(ALICE) == 10


def test_transfer_moves_balance() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    token.transfer(ALICE, BOB, 30)
    assert token.balance(ALICE) == 70
    assert token.balance(BOB) == 30
    assert token.total_supply() == 100

    (ev,) = host.events(topic="transfer")
    assert ev.topics == ("transfer", ALICE, BOB)
    assert ev.data == 30


def test_transfer_to_self_is_a_no_op_on_balance() -> None:
    _, token = _token()
    token.mint(ALICE, 100)
    token.transfer(ALICE, ALICE, 100)
    assert token.balance(ALICE) == 100


def test_transfer_failures_leave_balances_untouched() -> None:
    _, token = _token()
    token.mint(ALICE, 100)
    with pytest.raises(InsufficientBalance):
        token.transfer(ALICE, BOB, 101)
    with pytest.raises(NonPositiveAmount):
        token.transfer(ALICE, BOB, 0)
    assert token.balance(ALICE) == 100
    assert token.balance(BOB) == 0


def test_approve_and_transfer_from() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    token.approve(ALICE, BOB, 60, host.sequence + 10)
    assert token.allowance(ALICE, BOB) == 60

    token.transfer_from(BOB, ALICE, BOB, 25)
    assert token.allowance(ALICE, BOB) == 35
    assert token.balance(ALICE) == 75
    assert token.balance(BOB) == 25

    (ev,) = host.events(topic="approve")
    assert ev.topics == ("approve", ALICE, BOB)
    assert ev.data == (60, host.sequence + 10)


def test_transfer_from_insufficient_allowance() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    token.approve(ALICE, BOB, 10, host.sequence + 10)
    with pytest.raises(InsufficientAllowance):
        token.transfer_from(BOB, ALICE, BOB, 11)
    assert token.allowance(ALICE, BOB) == 10
    assert token.balance(ALICE) == 100


def test_transfer_from_insufficient_balance_restores_allowance() -> None:
    host, token = _token()
    token.mint(ALICE, 5)
    token.approve(ALICE, BOB, 50, host.sequence + 10)
    with pytest.raises(InsufficientBalance):
        token.transfer_from(BOB, ALICE, BOB, 20)
    # The allowance was decremented before the balance check; the rollback undoes it.
    assert token.allowance(ALICE, BOB) == 50


def test_transfer_from_requires_spender_authorization() -> None:
    host, token = _token(StaticAuthorizer([ADMIN, ALICE]))
    token.mint(ALICE, 100)
    token.approve(ALICE, BOB, 50, host.sequence + 10)
    with pytest.raises(AuthorizationError):
        token.transfer_from(BOB, ALICE, BOB, 10)
    assert token.allowance(ALICE, BOB) == 50


def test_approve_expiration_must_be_in_future() -> None:
    host, token = _token()
    token.approve(ALICE, BOB, 50, host.sequence + 100)
    with pytest.raises(ExpirationNotInFuture):
        token.approve(ALICE, BOB, 10, host.sequence)
    with pytest.raises(ExpirationNotInFuture):
        token.approve(ALICE, BOB, 10, host.sequence - 1)
    assert token.allowance(ALICE, BOB) == 50


def test_approve_overwrites_previous_allowance() -> None:
    host, token = _token()
    token.approve(ALICE, BOB, 50, host.sequence + 100)
    token.approve(ALICE, BOB, 5, host.sequence + 2)
    assert token.allowance(ALICE, BOB) == 5
    host.advance_sequence(3)
    assert token.allowance(ALICE, BOB) == 0


def test_approve_rejects_negative_amount() -> None:
    host, token = _token()
    with pytest.raises(ValidationError):
        token.approve(ALICE, BOB, -1, host.sequence + 1)


def test_allowance_expires_with_ledger_sequence() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    expiration = host.sequence + 5
    token.approve(ALICE, BOB, 40, expiration)

    host.advance_sequence(5)
    assert host.sequence == expiration
    assert token.allowance(ALICE, BOB) == 40

    host.advance_sequence()
    assert token.allowance(ALICE, BOB) == 0
    with pytest.raises(InsufficientAllowance):
        token.transfer_from(BOB, ALICE, BOB, 1)


def test_burn_from_spends_allowance() -> None:
    host, token = _token()
    token.mint(ALICE, 100)
    token.approve(ALICE, BOB, 30, host.sequence + 10)
    token.burn_from(BOB, ALICE, 30)
    assert token.balance(ALICE) == 70
    assert token.total_supply() == 70
    assert token.allowance(ALICE, BOB) == 0
    with pytest.raises(InsufficientAllowance):
        token.burn_from(BOB, ALICE, 1)
    assert _supply_matches(host, token)


def test_burn_from_insufficient_balance_rolls_back() -> None:
    host, token = _token()
    token.mint(ALICE, 10)
    token.approve(ALICE, BOB, 30, host.sequence + 10)
    with pytest.raises(InsufficientBalance):
        token.burn_from(BOB, ALICE, 20)
    assert token.allowance(ALICE, BOB) == 30
    assert token.total_supply() == 10


def test_set_admin_moves_mint_authority() -> None:
    auth = StaticAuthorizer([ADMIN])
    _, token = _token(auth)
    token.set_admin(ALICE)
    assert token.admin() == ALICE
    with pytest.raises(AuthorizationError):
        token.mint(BOB, 1)
    auth.allow(ALICE)
    token.mint(BOB, 1)
    assert token.balance(BOB) == 1


def test_contract_methods_require_an_invocation() -> None:
    host = Host(authorizer=AllowAllAuthorizer())
    contract = host.deploy(TokenContract)
    contract.initialize(ADMIN, 7, "Token A", "TKA")
    with pytest.raises(RuntimeError):
        contract.mint(ALICE, 1)


def test_approve_drops_expired_allowances() -> None:
    host, token = _token()
    token.approve(ALICE, BOB, 10, host.sequence + 1)
    token.approve(BOB, ALICE, 20, host.sequence + 50)
    host.advance_sequence(2)

    token.approve(ALICE, ADMIN, 5, host.sequence + 1)
    allowances = host.contract(token.address).state.allowances
    assert len(allowances) == 2
    assert token.allowance(ALICE, BOB) == 0
    assert token.allowance(BOB, ALICE) == 20
    assert token.allowance(ALICE, ADMIN) == 5

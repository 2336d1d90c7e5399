"""
In-process contract host.

This is the imperative shell around the contracts. It provides the
capabilities a contract consumes (`ContractEnv`): authorization checks, the
ledger sequence counter, event publication and cross-contract calls, and it
owns the transaction boundary.

Transactions:
- A top-level `invoke` journals every deployed contract's state and the event
  log length, then runs the call. Nested `invoke`s made by a running contract
  join that transaction.
- If anything raises, every journaled state is restored and events published
  during the call are dropped, then the raised exception propagates. No
  partial write survives.
- `simulate` runs a call the same way and always rolls back.

Authorization:
- A contract is implicitly authorized for calls it makes itself (the address
  equal to the direct invoker passes `require_auth`).
- Every other address is checked with the injected `Authorizer`.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.errors import AuthorizationError, InvariantViolation, ReentrancyError, ValidationError, describe_error
from ..logging import get_logger
from ..state.balances import Address
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from .auth import AuthRequest, Authorizer
from .config import HostConfig

log = get_logger(__name__)


@dataclass(frozen=True)
class ContractEvent:
    contract: Address
    topics: Tuple[Any, ...]
    data: Any
    sequence: int


@dataclass(frozen=True)
class _Frame:
    contract: Address
    function: str
    args: Tuple[Any, ...]
    invoker: Optional[Address]


@dataclass(frozen=True)
class _Journal:
    states: Dict[Address, Any]
    event_count: int


class DenyAllAuthorizer:
    def __call__(self, address: Address, request: AuthRequest) -> bool:
        return False


def derive_contract_address(kind: str, index: int) -> Address:
    """Deterministic contract id for the `index`-th deployment on a host."""
    return sha256_hex(domain_sep_bytes("contract", version=1) + canonical_json_bytes({"kind": kind, "index": index}))


class Host:
    """Runs contracts with all-or-nothing invocation semantics."""

    def __init__(self, config: Optional[HostConfig] = None, authorizer: Optional[Authorizer] = None) -> None:
        self.config = config or HostConfig()
        self.authorizer: Authorizer = authorizer or DenyAllAuthorizer()
        self._sequence = self.config.initial_sequence
        self._contracts: Dict[Address, Any] = {}
        self._events: List[ContractEvent] = []
        self._frames: List[_Frame] = []

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    def deploy(self, factory: Callable[["Host", Address], Any], address: Optional[Address] = None) -> Any:
        """
        Instantiate a contract and register it under `address`.

        `factory` is called as `factory(host, address)`; contract classes
        qualify directly.
        """
        if self._frames:
            raise RuntimeError("cannot deploy during an invocation")
        if address is None:
            address = derive_contract_address(getattr(factory, "__name__", "contract"), len(self._contracts))
        if address in self._contracts:
            raise ValueError(f"address already in use: {address}")
        contract = factory(self, address)
        self._contracts[address] = contract
        log.debug("contract_deployed", contract=address, kind=type(contract).__name__)
        return contract

    def contract(self, address: Address) -> Any:
        try:
            return self._contracts[address]
        except KeyError:
            raise ValidationError(f"no contract at {address}") from None

    # ------------------------------------------------------------------
    # Ledger sequence
    # ------------------------------------------------------------------

    @property
    def sequence(self) -> int:
        return self._sequence

    def advance_sequence(self, n: int = 1) -> int:
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ValueError(f"sequence can only move forward: {n!r}")
        if self._frames:
            raise RuntimeError("cannot advance the sequence during an invocation")
        self._sequence += n
        log.debug("sequence_advanced", sequence=self._sequence)
        return self._sequence

    # ------------------------------------------------------------------
    # ContractEnv capabilities
    # ------------------------------------------------------------------

    def current_contract_address(self) -> Address:
        return self._current_frame().contract

    def require_auth(self, address: Address) -> None:
        frame = self._current_frame()
        if frame.invoker is not None and frame.invoker == address:
            return
        request = AuthRequest(contract=frame.contract, function=frame.function, args=frame.args)
        if not self.authorizer(address, request):
            raise AuthorizationError(f"{address} did not authorize {frame.function} on {frame.contract}")

    def publish(self, topics: Tuple[Any, ...], data: Any) -> None:
        frame = self._current_frame()
        self._events.append(
            ContractEvent(contract=frame.contract, topics=tuple(topics), data=data, sequence=self._sequence)
        )

    def invoke(self, contract: Address, function: str, *args: Any) -> Any:
        """Call an exported contract function; top-level calls are transactions."""
        if self._frames:
            return self._dispatch(contract, function, args)

        journal = self._begin()
        try:
            result = self._dispatch(contract, function, args)
            if self.config.check_invariants:
                self._check_invariants()
        except Exception as exc:
            self._rollback(journal)
            code, _ = describe_error(exc)
            log.info("invoke_rolled_back", contract=contract, function=function, code=code, error=str(exc))
            raise
        log.debug("invoke_committed", contract=contract, function=function)
        return result

    def view(self, contract: Address, function: str, *args: Any) -> Any:
        """Call a read-only contract function. No journal, no auth."""
        target = self.contract(contract)
        if function not in getattr(target, "VIEWS", ()):
            raise ValidationError(f"{function!r} is not a view of {contract}")
        return getattr(target, function)(*args)

    def simulate(self, contract: Address, function: str, *args: Any) -> Any:
        """Run an invocation and discard all of its effects; return its result."""
        if self._frames:
            raise RuntimeError("cannot simulate during an invocation")
        journal = self._begin()
        try:
            return self._dispatch(contract, function, args)
        finally:
            self._rollback(journal)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def events(
        self,
        contract: Optional[Address] = None,
        topic: Optional[str] = None,
        start_sequence: Optional[int] = None,
    ) -> List[ContractEvent]:
        """Committed events, optionally filtered by contract, first topic and sequence."""
        out = []
        for ev in self._events:
            if contract is not None and ev.contract != contract:
                continue
            if topic is not None and (not ev.topics or ev.topics[0] != topic):
                continue
            if start_sequence is not None and ev.sequence < start_sequence:
                continue
            out.append(ev)
        return out

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _current_frame(self) -> _Frame:
        if not self._frames:
            raise RuntimeError("no active invocation; call contracts through Host.invoke")
        return self._frames[-1]

    def _dispatch(self, contract: Address, function: str, args: Tuple[Any, ...]) -> Any:
        target = self.contract(contract)
        if function not in getattr(target, "EXPORTS", ()):
            raise ValidationError(f"{function!r} is not exported by {contract}")
        if self.config.reentrancy_guard and any(f.contract == contract for f in self._frames):
            raise ReentrancyError(f"re-entrant call into {contract}.{function}")

        invoker = self._frames[-1].contract if self._frames else None
        self._frames.append(_Frame(contract=contract, function=function, args=tuple(args), invoker=invoker))
        try:
            return getattr(target, function)(*args)
        finally:
            self._frames.pop()

    def _begin(self) -> _Journal:
        return _Journal(
            states={address: copy.deepcopy(c.state) for address, c in self._contracts.items()},
            event_count=len(self._events),
        )

    def _rollback(self, journal: _Journal) -> None:
        for address, state in journal.states.items():
            self._contracts[address].state = state
        del self._events[journal.event_count:]

    def _check_invariants(self) -> None:
        violations = []
        for address, c in self._contracts.items():
            verify = getattr(c, "verify_invariants", None)
            if verify is None:
                continue
            violations.extend(f"{address}:{name}" for name in verify())
        if violations:
            raise InvariantViolation(violations)

"""
Authorization collaborators.

The host asks an `Authorizer` whether `address` approves the action described
by an `AuthRequest` (the contract, function and arguments of the call that
demanded the approval). Any callable with that shape works; three are
provided:

- `AllowAllAuthorizer`: every request passes. For trusted embeddings and tests.
- `StaticAuthorizer`: a fixed allow-list of addresses, optionally narrowed to
  specific functions.
- `SignatureAuthorizer`: BLS12-381 signatures (py_ecc `G2Basic`). Addresses
  are 48-byte hex public keys; each submitted signature authorizes exactly one
  matching request and is consumed when used.

Signed message:
    sign SHA256( domain_sep(f"auth:{chain_id}", v1) || canonical_json_bytes(auth_signing_dict) )
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from py_ecc.bls import G2Basic

from ..state.balances import Address
from ..state.canonical import canonical_hex_fixed_allow_0x, canonical_json_bytes, domain_sep_bytes, hex_to_bytes_fixed

PUBKEY_NBYTES = 48
SIGNATURE_NBYTES = 96


@dataclass(frozen=True)
class AuthRequest:
    contract: Address
    function: str
    args: Tuple[Any, ...] = ()


Authorizer = Callable[[Address, AuthRequest], bool]


class AllowAllAuthorizer:
    def __call__(self, address: Address, request: AuthRequest) -> bool:
        return True


class StaticAuthorizer:
    """
    Allow-list authorizer.

    `functions`, when given, restricts every listed address to those function
    names; otherwise an allowed address may approve anything.
    """

    def __init__(self, addresses: Iterable[Address] = (), functions: Optional[Iterable[str]] = None) -> None:
        self._addresses = set(addresses)
        self._functions = None if functions is None else frozenset(functions)

    def allow(self, address: Address) -> None:
        self._addresses.add(address)

    def revoke(self, address: Address) -> None:
        self._addresses.discard(address)

    def __call__(self, address: Address, request: AuthRequest) -> bool:
        if address not in self._addresses:
            return False
        return self._functions is None or request.function in self._functions


def auth_signing_dict(address: Address, request: AuthRequest) -> Dict[str, Any]:
    return {
        "address": address,
        "contract": request.contract,
        "function": request.function,
        "args": list(request.args),
    }


def auth_message_hash(address: Address, request: AuthRequest, chain_id: str) -> bytes:
    payload = canonical_json_bytes(auth_signing_dict(address, request))
    return hashlib.sha256(domain_sep_bytes(f"auth:{chain_id}", version=1) + payload).digest()


def address_from_secret_key(secret_key: int) -> Address:
    return "0x" + G2Basic.SkToPk(secret_key).hex()


def sign_auth_request(secret_key: int, request: AuthRequest, chain_id: str) -> str:
    """Sign `request` on behalf of the address derived from `secret_key`."""
    address = address_from_secret_key(secret_key)
    sig = G2Basic.Sign(secret_key, auth_message_hash(address, request, chain_id))
    return "0x" + sig.hex()


class SignatureAuthorizer:
    """
    One-shot BLS signature authorizer.

    Signatures are handed in ahead of the invocation with `submit`. A request
    is approved when a pending signature for (address, request) verifies; the
    signature is then discarded so it cannot be replayed.
    """

    def __init__(self, chain_id: str) -> None:
        self.chain_id = chain_id
        self._pending: Dict[Tuple[Address, bytes], List[str]] = {}

    def submit(self, address: Address, request: AuthRequest, signature_hex: str) -> None:
        addr = canonical_hex_fixed_allow_0x(address, nbytes=PUBKEY_NBYTES, name="address")
        hex_to_bytes_fixed(signature_hex, nbytes=SIGNATURE_NBYTES, name="signature")
        key = (addr, auth_message_hash(addr, request, self.chain_id))
        self._pending.setdefault(key, []).append(signature_hex)

    def pending(self) -> int:
        return sum(len(sigs) for sigs in self._pending.values())

    def __call__(self, address: Address, request: AuthRequest) -> bool:
        try:
            addr = canonical_hex_fixed_allow_0x(address, nbytes=PUBKEY_NBYTES, name="address")
        except (TypeError, ValueError):
            # Contract ids and other non-key addresses cannot sign.
            return False
        msg_hash = auth_message_hash(addr, request, self.chain_id)
        sigs = self._pending.get((addr, msg_hash))
        if not sigs:
            return False

        pubkey = hex_to_bytes_fixed(addr, nbytes=PUBKEY_NBYTES, name="address")
        for i, sig_hex in enumerate(sigs):
            sig = hex_to_bytes_fixed(sig_hex, nbytes=SIGNATURE_NBYTES, name="signature")
            if G2Basic.Verify(pubkey, msg_hash, sig):
                del sigs[i]
                if not sigs:
                    del self._pending[(addr, msg_hash)]
                return True
        return False

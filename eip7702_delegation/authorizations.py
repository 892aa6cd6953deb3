"""Sign and submit EIP-7702 authorizations for the configured EOA.

A delegation is established by authorizing a contract address and revoked by
authorizing the zero address. Both are sent as a type-4 transaction from the
EOA to itself, carrying a single authorization. Signing is done by
``eth-account`` and broadcasting by ``web3``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, MutableMapping, Optional, TYPE_CHECKING

import requests
from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3
from web3.exceptions import Web3Exception

from .addresses import ZERO_ADDRESS, is_zero_address, validate_address
from .errors import ConfigurationError, TransportError
from .networks import Network

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
else:  # pragma: no cover - runtime alias
    LocalAccount = Any  # type: ignore[assignment]

_LOGGER = logging.getLogger(__name__)

# 21000 intrinsic gas plus 25000 per authorization, with headroom.
DEFAULT_GAS_LIMIT = 100_000


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a submitted delegation or revocation."""

    authority: str
    target: str
    chain_id: int
    nonce: int
    tx_hash: str
    explorer_url: Optional[str] = None

    @property
    def is_revocation(self) -> bool:
        return is_zero_address(self.target)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "authority": self.authority,
            "target": self.target,
            "chain_id": self.chain_id,
            "nonce": self.nonce,
            "tx_hash": self.tx_hash,
            "explorer_url": self.explorer_url,
            "revocation": self.is_revocation,
        }


def _get_env() -> MutableMapping[str, str]:
    """Expose ``os.environ`` (after ``load_dotenv``) separately to simplify testing."""

    load_dotenv()
    return os.environ


def load_signer(env: Mapping[str, str] | None = None) -> LocalAccount:
    """Return the local account for ``PRIVATE_KEY``.

    The key may be given with or without the ``0x`` prefix.

    Raises
    ------
    ConfigurationError
        If ``PRIVATE_KEY`` is unset or not a valid key.
    """

    if env is None:
        env = _get_env()

    secret = (env.get("PRIVATE_KEY") or "").strip()
    if not secret:
        raise ConfigurationError("Please provide PRIVATE_KEY in the environment or .env file")
    if not secret.startswith("0x"):
        secret = f"0x{secret}"

    try:
        return Account.from_key(secret)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError("PRIVATE_KEY is not a valid private key") from exc


def resolve_delegation_target(
    override: Optional[str] = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Return the checksummed contract to delegate to.

    ``override`` wins over ``DELEGATION_CONTRACT``. The zero address is
    refused because authorizing it revokes instead of delegating.
    """

    if override is None:
        if env is None:
            env = _get_env()
        override = (env.get("DELEGATION_CONTRACT") or "").strip() or None
    if not override:
        raise ConfigurationError("Please provide DELEGATION_CONTRACT address (or --contract)")

    target = validate_address(override)
    if is_zero_address(target):
        raise ConfigurationError("Delegating to the zero address revokes delegation; use the revoke script instead")
    return Web3.to_checksum_address(target)


def sign_authorization(account: LocalAccount, target: str, chain_id: int, nonce: int):
    """Sign an authorization letting ``account`` run the code at ``target``."""

    return account.sign_authorization(
        {
            "chainId": chain_id,
            "address": Web3.to_checksum_address(target),
            "nonce": nonce,
        }
    )


def _fee_fields(w3: Web3, network: Network) -> Dict[str, int]:
    priority = int(w3.eth.max_priority_fee)
    block = w3.eth.get_block("latest")
    try:
        base_fee = int(block["baseFeePerGas"])
    except (KeyError, TypeError) as exc:
        raise TransportError(f"Latest block on {network.name} has no baseFeePerGas; EIP-1559 fees unavailable") from exc
    return {
        "maxPriorityFeePerGas": priority,
        "maxFeePerGas": base_fee * 2 + priority,
    }


def submit_authorization(
    w3: Web3,
    account: LocalAccount,
    target: str,
    network: Network,
    *,
    gas: int = DEFAULT_GAS_LIMIT,
) -> AuthorizationResult:
    """Sign an authorization for ``target`` and send it in a self-call.

    The authority is also the transaction sender, so its nonce is consumed by
    the transaction before the authorization is applied; the authorization
    therefore carries the account nonce plus one.

    Raises:
        ConfigurationError: If the RPC endpoint serves a different chain, or the
            transaction cannot be signed.
        TransportError: If reading chain state (including the base fee) or
            broadcasting fails.
    """

    target = Web3.to_checksum_address(validate_address(target))
    try:
        chain_id = int(w3.eth.chain_id)
        if chain_id != network.chain_id:
            raise ConfigurationError(
                f"RPC endpoint reports chain {chain_id}, expected {network.chain_id} for {network.name}"
            )
        tx_nonce = int(w3.eth.get_transaction_count(account.address))
        fees = _fee_fields(w3, network)
    except (requests.RequestException, Web3Exception, OSError) as exc:
        raise TransportError(f"Failed to read chain state on {network.name}: {exc}") from exc

    auth_nonce = tx_nonce + 1
    authorization = sign_authorization(account, target, chain_id, auth_nonce)
    _LOGGER.debug("Signed authorization for %s -> %s (chain %s, nonce %s)", account.address, target, chain_id, auth_nonce)

    transaction: Dict[str, Any] = {
        "type": 4,
        "chainId": chain_id,
        "nonce": tx_nonce,
        "to": account.address,
        "value": 0,
        "data": "0x",
        "gas": gas,
        "authorizationList": [authorization],
        **fees,
    }
    try:
        signed = account.sign_transaction(transaction)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Failed to sign authorization transaction for {network.name}: {exc}") from exc

    try:
        raw_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    except (requests.RequestException, Web3Exception, OSError, ValueError) as exc:
        raise TransportError(f"Failed to broadcast authorization on {network.name}: {exc}") from exc

    tx_hash = "0x" + bytes(raw_hash).hex()
    _LOGGER.info("Authorization transaction sent: %s", tx_hash)
    return AuthorizationResult(
        authority=account.address,
        target=target,
        chain_id=chain_id,
        nonce=auth_nonce,
        tx_hash=tx_hash,
        explorer_url=network.transaction_url(tx_hash),
    )


def delegate(w3: Web3, account: LocalAccount, contract: str, network: Network, **kwargs: Any) -> AuthorizationResult:
    """Delegate ``account`` to ``contract``; the zero address is rejected."""

    if is_zero_address(validate_address(contract)):
        raise ConfigurationError("Delegating to the zero address revokes delegation; use revoke() instead")
    return submit_authorization(w3, account, contract, network, **kwargs)


def revoke(w3: Web3, account: LocalAccount, network: Network, **kwargs: Any) -> AuthorizationResult:
    """Clear the delegation of ``account`` by authorizing the zero address."""

    return submit_authorization(w3, account, ZERO_ADDRESS, network, **kwargs)


__all__ = [
    "AuthorizationResult",
    "DEFAULT_GAS_LIMIT",
    "delegate",
    "load_signer",
    "resolve_delegation_target",
    "revoke",
    "sign_authorization",
    "submit_authorization",
]

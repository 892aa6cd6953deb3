"""Tests for signing and submitting delegation authorizations."""
from __future__ import annotations

import pytest
import requests
from eth_account import Account
from web3 import Web3

from eip7702_delegation.addresses import ZERO_ADDRESS
from eip7702_delegation.authorizations import (
    AuthorizationResult,
    delegate,
    load_signer,
    resolve_delegation_target,
    revoke,
    sign_authorization,
    submit_authorization,
)
from eip7702_delegation.errors import ConfigurationError, InvalidAddressFormatError, TransportError

from .fakes import DELEGATE, TEST_PRIVATE_KEY, FakeWeb3

CHECKSUM_DELEGATE = Web3.to_checksum_address(DELEGATE)


@pytest.fixture()
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


def test_load_signer_accepts_key_without_prefix(account) -> None:
    signer = load_signer({"PRIVATE_KEY": TEST_PRIVATE_KEY[2:]})
    assert signer.address == account.address


def test_load_signer_reads_process_environment(monkeypatch: pytest.MonkeyPatch, account) -> None:
    monkeypatch.setattr("eip7702_delegation.authorizations.load_dotenv", lambda: False)
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    assert load_signer().address == account.address


@pytest.mark.parametrize("env", [{}, {"PRIVATE_KEY": "  "}])
def test_load_signer_requires_key(env) -> None:
    with pytest.raises(ConfigurationError):
        load_signer(env)


def test_load_signer_rejects_garbage_key() -> None:
    with pytest.raises(ConfigurationError):
        load_signer({"PRIVATE_KEY": "not-a-key"})


def test_resolve_delegation_target_prefers_override() -> None:
    target = resolve_delegation_target(DELEGATE, {"DELEGATION_CONTRACT": "0x" + "1" * 40})
    assert target == CHECKSUM_DELEGATE


def test_resolve_delegation_target_reads_environment() -> None:
    assert resolve_delegation_target(env={"DELEGATION_CONTRACT": DELEGATE}) == CHECKSUM_DELEGATE


def test_resolve_delegation_target_requires_a_value() -> None:
    with pytest.raises(ConfigurationError):
        resolve_delegation_target(env={})


def test_resolve_delegation_target_refuses_zero_address() -> None:
    with pytest.raises(ConfigurationError):
        resolve_delegation_target(ZERO_ADDRESS)


def test_resolve_delegation_target_validates_format() -> None:
    with pytest.raises(InvalidAddressFormatError):
        resolve_delegation_target("0x1234")


def test_sign_authorization_carries_chain_target_and_nonce(account) -> None:
    authorization = sign_authorization(account, DELEGATE, 1, 8)
    assert authorization.chain_id == 1
    assert authorization.nonce == 8
    assert Web3.to_checksum_address(authorization.address) == CHECKSUM_DELEGATE


def test_submit_authorization_sends_type4_self_call(account, registry) -> None:
    w3 = FakeWeb3(chain_id=1, nonce=7)
    result = submit_authorization(w3, account, DELEGATE, registry.resolve("mainnet"))  # type: ignore[arg-type]

    assert isinstance(result, AuthorizationResult)
    assert result.authority == account.address
    assert result.target == CHECKSUM_DELEGATE
    assert result.chain_id == 1
    assert result.nonce == 8
    assert result.tx_hash == "0x" + "ab" * 32
    assert result.explorer_url == f"https://etherscan.io/tx/{result.tx_hash}"
    assert result.is_revocation is False

    assert len(w3.eth.sent) == 1
    assert w3.eth.sent[0][0] == 4


def test_submit_authorization_refuses_chain_mismatch(account, registry) -> None:
    w3 = FakeWeb3(chain_id=5)
    with pytest.raises(ConfigurationError):
        submit_authorization(w3, account, DELEGATE, registry.resolve("mainnet"))  # type: ignore[arg-type]
    assert w3.eth.sent == []


def test_submit_authorization_wraps_broadcast_failures(account, registry) -> None:
    w3 = FakeWeb3(chain_id=8453, error=requests.ConnectionError("reset by peer"))
    with pytest.raises(TransportError) as excinfo:
        submit_authorization(w3, account, DELEGATE, registry.resolve("base"))  # type: ignore[arg-type]
    assert "base" in str(excinfo.value)


def test_submit_authorization_requires_a_base_fee(account, registry) -> None:
    w3 = FakeWeb3(block={"number": 1})
    with pytest.raises(TransportError) as excinfo:
        submit_authorization(w3, account, DELEGATE, registry.resolve("mainnet"))  # type: ignore[arg-type]
    assert "baseFeePerGas" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, KeyError)
    assert w3.eth.sent == []


class _UnsignableAccount:
    """Signs authorizations with a real key but rejects the transaction."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.address = inner.address

    def sign_authorization(self, authorization):
        return self._inner.sign_authorization(authorization)

    def sign_transaction(self, transaction):
        raise TypeError("Transaction had invalid fields: {'authorizationList'}")


def test_submit_authorization_wraps_signing_failures(account, registry) -> None:
    w3 = FakeWeb3()
    with pytest.raises(ConfigurationError) as excinfo:
        submit_authorization(w3, _UnsignableAccount(account), DELEGATE, registry.resolve("mainnet"))  # type: ignore[arg-type]
    assert "Failed to sign" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, TypeError)
    assert w3.eth.sent == []


def test_delegate_refuses_zero_address(account, registry) -> None:
    with pytest.raises(ConfigurationError):
        delegate(FakeWeb3(), account, ZERO_ADDRESS, registry.resolve("mainnet"))  # type: ignore[arg-type]


def test_revoke_targets_zero_address(account, registry) -> None:
    w3 = FakeWeb3(chain_id=11155111, nonce=0)
    result = revoke(w3, account, registry.resolve("sepolia"))  # type: ignore[arg-type]
    assert result.target == ZERO_ADDRESS
    assert result.is_revocation is True
    assert result.nonce == 1
    assert result.explorer_url.startswith("https://sepolia.etherscan.io/tx/")
    assert result.as_dict()["revocation"] is True

"""Decode EIP-7702 delegation designators from on-chain account code.

An account whose code starts with ``0xef0100 || <20-byte address>`` executes
the code of that address. Anything else is either an empty account (EOA) or a
regular contract. The helpers here only decode that byte pattern; fetching the
code is the job of a chain reader (see :mod:`eip7702_delegation.chain`).
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from web3 import Web3

from .errors import MalformedCodeError
from .networks import DEFAULT_NETWORK, Network, NetworkRegistry

_LOGGER = logging.getLogger(__name__)

DELEGATION_INDICATOR = "0xef0100"
# Indicator (3 bytes) followed by the delegate address (20 bytes).
DESIGNATOR_LENGTH = 23

_INDICATOR_DIGITS = DELEGATION_INDICATOR[2:]
_HEX_CODE = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")

NO_CODE_MESSAGE = "No code at address (EOA or no delegation)"
HAS_CODE_MESSAGE = "Address has code but no EIP-7702 delegation"


@dataclass(frozen=True)
class NotDelegated:
    """The account has no code, or code that is not a delegation designator."""

    address: Optional[str]
    network: Optional[str]
    message: str
    code: Optional[str] = None

    is_delegated = False
    delegated_to = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "is_delegated": False,
            "address": self.address,
            "network": self.network,
            "message": self.message,
        }
        if self.code is not None:
            payload["code"] = self.code
        return payload


@dataclass(frozen=True)
class Delegated:
    """The account code is a delegation designator pointing at ``delegated_to``."""

    address: Optional[str]
    network: Optional[str]
    delegated_to: str
    code: str
    message: str

    is_delegated = True

    @property
    def checksum_delegated_to(self) -> str:
        return Web3.to_checksum_address(self.delegated_to)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_delegated": True,
            "address": self.address,
            "network": self.network,
            "delegated_to": self.delegated_to,
            "code": self.code,
            "message": self.message,
        }


@dataclass(frozen=True)
class DelegationError:
    """A batch entry whose check failed; the other entries are unaffected."""

    address: str
    network: str
    error: str
    kind: str = "DelegationCheckError"

    is_delegated = False
    delegated_to = None
    code = None

    @property
    def message(self) -> str:
        return self.error

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_delegated": False,
            "address": self.address,
            "network": self.network,
            "error": self.error,
            "error_type": self.kind,
        }


DelegationRecord = Union[NotDelegated, Delegated, DelegationError]


def _normalise_code(code: Union[str, bytes, bytearray, None]) -> Optional[str]:
    if code is None:
        return None
    if isinstance(code, (bytes, bytearray)):
        return "0x" + bytes(code).hex()
    if not isinstance(code, str):
        raise MalformedCodeError(f"Account code must be a hex string, got {type(code).__name__}")
    return code.strip()


def inspect_code(
    code: Union[str, bytes, bytearray, None],
    address: Optional[str] = None,
    network: Optional[str] = None,
) -> Union[NotDelegated, Delegated]:
    """Classify ``code`` as empty, a delegation designator, or ordinary bytecode.

    Args:
        code: ``0x``-prefixed hex as returned by ``eth_getCode``. Raw bytes
            (e.g. ``HexBytes`` from web3) are accepted and hex-encoded.
        address: Account the code belongs to, copied into the result.
        network: Network name, copied into the result.

    Returns:
        :class:`Delegated` when the code is ``0xef0100`` followed by at least
        20 more bytes (the delegate is the first 20), otherwise :class:`NotDelegated`.

    Raises:
        MalformedCodeError: If ``code`` is not even-length hex after ``0x``.
    """

    text = _normalise_code(code)
    if not text or text == "0x":
        return NotDelegated(address=address, network=network, message=NO_CODE_MESSAGE)

    if not _HEX_CODE.match(text):
        raise MalformedCodeError(f"Account code is not valid hex: {text[:66]!r}")

    digits = text[2:].lower()
    if not digits.startswith(_INDICATOR_DIGITS):
        return NotDelegated(address=address, network=network, message=HAS_CODE_MESSAGE, code=text)

    size = len(digits) // 2
    if size < DESIGNATOR_LENGTH:
        return NotDelegated(
            address=address,
            network=network,
            message=(
                f"{HAS_CODE_MESSAGE} (code starts with {DELEGATION_INDICATOR} but is "
                f"only {size} bytes long, expected at least {DESIGNATOR_LENGTH})"
            ),
            code=text,
        )

    delegated_to = "0x" + digits[len(_INDICATOR_DIGITS):DESIGNATOR_LENGTH * 2]
    return Delegated(
        address=address,
        network=network,
        delegated_to=delegated_to,
        code=text,
        message=f"Address is delegated to {delegated_to}",
    )


class ChainReader(Protocol):
    def get_code(self, address: str, network: Network) -> Union[str, bytes]:
        ...


class DelegationInspector:
    """Resolve networks, read account code and classify it.

    Parameters
    ----------
    reader:
        Object exposing ``get_code(address, network)``. Transport failures are
        expected to surface as :class:`~eip7702_delegation.errors.TransportError`.
    registry:
        Networks the inspector may query.
    """

    def __init__(self, reader: ChainReader, registry: NetworkRegistry) -> None:
        self.reader = reader
        self.registry = registry

    def _check(self, address: str, network: Network) -> Union[NotDelegated, Delegated]:
        code = self.reader.get_code(address, network)
        result = inspect_code(code, address=address, network=network.name)
        _LOGGER.debug("%s on %s: %s", address, network.name, result.message)
        return result

    def check(self, address: str, network: str = DEFAULT_NETWORK) -> Union[NotDelegated, Delegated]:
        """Check a single address; any failure propagates to the caller."""

        return self._check(address, self.registry.resolve(network))

    def _check_captured(self, address: str, network: Network) -> DelegationRecord:
        try:
            return self._check(address, network)
        except Exception as exc:
            _LOGGER.warning("Delegation check failed for %s on %s: %s", address, network.name, exc)
            return DelegationError(
                address=address,
                network=network.name,
                error=str(exc),
                kind=type(exc).__name__,
            )

    def check_many(
        self,
        addresses: Sequence[str],
        network: str = DEFAULT_NETWORK,
        *,
        max_workers: int = 1,
    ) -> List[DelegationRecord]:
        """Check every address, returning one record per input in input order.

        The network is resolved once up front, so an unknown name fails the
        whole call. Failures for individual addresses are captured as
        :class:`DelegationError` entries instead of aborting the batch. With
        ``max_workers`` above one the reads are issued from a thread pool.
        """

        descriptor = self.registry.resolve(network)
        if max_workers <= 1 or len(addresses) <= 1:
            return [self._check_captured(address, descriptor) for address in addresses]

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda address: self._check_captured(address, descriptor), addresses))


__all__ = [
    "DELEGATION_INDICATOR",
    "DESIGNATOR_LENGTH",
    "ChainReader",
    "Delegated",
    "DelegationError",
    "DelegationInspector",
    "DelegationRecord",
    "NotDelegated",
    "inspect_code",
]

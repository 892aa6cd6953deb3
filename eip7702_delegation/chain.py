"""Read account code over JSON-RPC with web3.py."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from .errors import TransportError
from .networks import Network

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

Web3Factory = Callable[[str, float], Web3]


def connect(rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> Web3:
    """Return a ``Web3`` client bound to ``rpc_url`` (no connectivity probe)."""

    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


class Web3ChainReader:
    """Fetch ``eth_getCode`` results, one cached client per RPC endpoint."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT, web3_factory: Optional[Web3Factory] = None) -> None:
        self.timeout = timeout
        self._factory = web3_factory or connect
        self._clients: Dict[str, Web3] = {}
        self._lock = threading.Lock()

    def client(self, network: Network) -> Web3:
        with self._lock:
            w3 = self._clients.get(network.rpc_url)
            if w3 is None:
                w3 = self._factory(network.rpc_url, self.timeout)
                self._clients[network.rpc_url] = w3
            return w3

    def get_code(self, address: str, network: Network) -> str:
        """Return the account code at ``address`` as ``0x``-prefixed hex.

        Raises:
            TransportError: If the RPC request fails for any reason.
        """

        w3 = self.client(network)
        checksummed = Web3.to_checksum_address(address)
        _LOGGER.debug("eth_getCode %s via %s", checksummed, network.rpc_url)
        try:
            code = w3.eth.get_code(checksummed)
        except (requests.RequestException, Web3Exception, OSError, ValueError) as exc:
            raise TransportError(
                f"Failed to fetch code for {address} on {network.name}: {exc}"
            ) from exc
        return "0x" + bytes(code).hex()


__all__ = ["DEFAULT_TIMEOUT", "Web3ChainReader", "connect"]

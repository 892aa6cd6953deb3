"""Network descriptors and the registry used to resolve them by name."""
from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .errors import UnknownNetworkError

DEFAULT_NETWORK = "mainnet"


@dataclass(frozen=True)
class Network:
    """Chain identifier and endpoints for a supported network."""

    name: str
    chain_id: int
    rpc_url: str
    explorer_url: Optional[str] = None

    def transaction_url(self, tx_hash: str) -> Optional[str]:
        if not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def address_url(self, address: str) -> Optional[str]:
        if not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/address/{address}"


@dataclass(frozen=True)
class _NetworkDefaults:
    chain_id: int
    rpc_url: str
    rpc_env: str
    explorer_url: str


_DEFAULTS: Mapping[str, _NetworkDefaults] = MappingProxyType(
    {
        "mainnet": _NetworkDefaults(
            chain_id=1,
            rpc_url="https://eth.llamarpc.com",
            rpc_env="MAINNET_RPC_URL",
            explorer_url="https://etherscan.io",
        ),
        "sepolia": _NetworkDefaults(
            chain_id=11155111,
            rpc_url="https://rpc.sepolia.org",
            rpc_env="SEPOLIA_RPC_URL",
            explorer_url="https://sepolia.etherscan.io",
        ),
        "base": _NetworkDefaults(
            chain_id=8453,
            rpc_url="https://mainnet.base.org",
            rpc_env="BASE_RPC_URL",
            explorer_url="https://basescan.org",
        ),
        "baseSepolia": _NetworkDefaults(
            chain_id=84532,
            rpc_url="https://sepolia.base.org",
            rpc_env="BASE_SEPOLIA_RPC_URL",
            explorer_url="https://sepolia.basescan.org",
        ),
    }
)


class NetworkRegistry:
    """Immutable lookup table from network name to :class:`Network`."""

    def __init__(self, networks: Mapping[str, Network]) -> None:
        self._networks: Dict[str, Network] = dict(networks)

    def __contains__(self, name: object) -> bool:
        return name in self._networks

    def __len__(self) -> int:
        return len(self._networks)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._networks)

    def resolve(self, name: str) -> Network:
        """Return the descriptor registered under ``name``.

        Raises:
            UnknownNetworkError: If ``name`` is not registered.
        """

        try:
            return self._networks[name]
        except KeyError:
            raise UnknownNetworkError(name, self.names) from None

    def with_rpc_url(self, name: str, rpc_url: str) -> "NetworkRegistry":
        """Return a copy of the registry with ``name`` pointing at ``rpc_url``."""

        network = self.resolve(name)
        networks = dict(self._networks)
        networks[name] = Network(
            name=network.name,
            chain_id=network.chain_id,
            rpc_url=rpc_url,
            explorer_url=network.explorer_url,
        )
        return NetworkRegistry(networks)


def default_registry(env: Mapping[str, str] | None = None) -> NetworkRegistry:
    """Build the registry of standard networks, honouring RPC overrides in ``env``.

    ``env`` defaults to ``os.environ``. Each network reads its own variable
    (``MAINNET_RPC_URL``, ``SEPOLIA_RPC_URL``, ``BASE_RPC_URL``,
    ``BASE_SEPOLIA_RPC_URL``); blank values fall back to the public endpoint.
    """

    if env is None:
        env = os.environ

    networks: Dict[str, Network] = {}
    for name, defaults in _DEFAULTS.items():
        networks[name] = Network(
            name=name,
            chain_id=defaults.chain_id,
            rpc_url=env.get(defaults.rpc_env) or defaults.rpc_url,
            explorer_url=defaults.explorer_url,
        )
    return NetworkRegistry(networks)


__all__ = [
    "DEFAULT_NETWORK",
    "Network",
    "NetworkRegistry",
    "default_registry",
]

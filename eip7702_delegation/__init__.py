"""Inspect, establish and revoke EIP-7702 delegations for externally owned accounts."""
from __future__ import annotations

from .addresses import ZERO_ADDRESS, is_valid_address, partition_addresses, validate_address
from .delegation import (
    DELEGATION_INDICATOR,
    Delegated,
    DelegationError,
    DelegationInspector,
    DelegationRecord,
    NotDelegated,
    inspect_code,
)
from .errors import (
    ConfigurationError,
    DelegationCheckError,
    InvalidAddressFormatError,
    MalformedCodeError,
    TransportError,
    UnknownNetworkError,
)
from .networks import DEFAULT_NETWORK, Network, NetworkRegistry, default_registry

__all__ = [
    "ConfigurationError",
    "DEFAULT_NETWORK",
    "DELEGATION_INDICATOR",
    "Delegated",
    "DelegationCheckError",
    "DelegationError",
    "DelegationInspector",
    "DelegationRecord",
    "InvalidAddressFormatError",
    "MalformedCodeError",
    "Network",
    "NetworkRegistry",
    "NotDelegated",
    "TransportError",
    "UnknownNetworkError",
    "ZERO_ADDRESS",
    "default_registry",
    "inspect_code",
    "is_valid_address",
    "partition_addresses",
    "validate_address",
]

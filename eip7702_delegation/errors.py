"""Exception hierarchy shared by the delegation helpers and scripts."""
from __future__ import annotations


class DelegationCheckError(RuntimeError):
    """Base class for failures raised by the delegation tooling."""


class UnknownNetworkError(DelegationCheckError):
    """Raised when a network name is not present in the registry."""

    def __init__(self, name: str, available: tuple[str, ...] = ()) -> None:
        self.name = name
        self.available = available
        message = f"Unknown network: {name}"
        if available:
            message += f". Available networks: {', '.join(available)}"
        super().__init__(message)


class TransportError(DelegationCheckError):
    """Raised when a chain read or broadcast fails."""


class MalformedCodeError(DelegationCheckError, ValueError):
    """Raised when account code is not a ``0x``-prefixed, even-length hex string."""


class InvalidAddressFormatError(DelegationCheckError, ValueError):
    """Raised when an argument is not a 20-byte hex address."""


class ConfigurationError(DelegationCheckError):
    """Raised when the environment lacks a value needed to sign authorizations."""


__all__ = [
    "ConfigurationError",
    "DelegationCheckError",
    "InvalidAddressFormatError",
    "MalformedCodeError",
    "TransportError",
    "UnknownNetworkError",
]

"""Shared fixtures for the delegation test-suite."""
from __future__ import annotations

from typing import Dict, Union

import pytest

from eip7702_delegation.errors import TransportError
from eip7702_delegation.networks import NetworkRegistry, default_registry

from .fakes import BROKEN, CONTRACT, CONTRACT_CODE, DELEGATED_CODE, EOA, SMART_EOA, FakeReader


@pytest.fixture()
def registry() -> NetworkRegistry:
    return default_registry({})


@pytest.fixture()
def codes() -> Dict[str, Union[str, Exception]]:
    return {
        EOA: "0x",
        SMART_EOA: DELEGATED_CODE,
        CONTRACT: CONTRACT_CODE,
        BROKEN: TransportError("connection refused"),
    }


@pytest.fixture()
def reader(codes: Dict[str, Union[str, Exception]]) -> FakeReader:
    return FakeReader(codes)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer RPC overrides and keys out of the tests."""

    for name in (
        "RPC_URL",
        "MAINNET_RPC_URL",
        "SEPOLIA_RPC_URL",
        "BASE_RPC_URL",
        "BASE_SEPOLIA_RPC_URL",
        "PRIVATE_KEY",
        "DELEGATION_CONTRACT",
    ):
        monkeypatch.delenv(name, raising=False)

#!/usr/bin/env python3
"""Revoke the EIP-7702 delegation of the configured EOA.

Revocation is an authorization for the zero address, which clears the
delegation designator and returns the account to a plain EOA.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Sequence

from dotenv import load_dotenv

from eip7702_delegation.addresses import ZERO_ADDRESS
from eip7702_delegation.authorizations import DEFAULT_GAS_LIMIT, AuthorizationResult, load_signer, revoke
from eip7702_delegation.chain import connect
from eip7702_delegation.errors import DelegationCheckError
from eip7702_delegation.networks import DEFAULT_NETWORK, default_registry


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Revoke the EIP-7702 delegation of your EOA.")
    parser.add_argument("--network", default=DEFAULT_NETWORK, help="Target network (default: %(default)s).")
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="Override the RPC endpoint (falls back to RPC_URL, then the network default).",
    )
    parser.add_argument("--gas", type=int, default=DEFAULT_GAS_LIMIT, help="Gas limit for the self-call.")
    parser.add_argument("--json", action="store_true", help="Emit the result as JSON.")
    parser.add_argument("--log-level", default="WARNING", help="Logging verbosity (DEBUG, INFO, WARNING)")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _print_result(result: AuthorizationResult) -> None:
    print("\n✅ Authorization signed:")
    print(f"Chain ID: {result.chain_id}")
    print(f"Address: {result.target}")
    print(f"Nonce: {result.nonce}")
    print("\n✅ Revocation transaction sent!")
    print(f"Transaction hash: {result.tx_hash}")
    if result.explorer_url:
        print(f"View on explorer: {result.explorer_url}")
    print("\nYour account has been returned to normal EOA state.")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    load_dotenv()

    try:
        registry = default_registry()
        rpc_url = args.rpc_url or os.getenv("RPC_URL")
        if rpc_url:
            registry = registry.with_rpc_url(args.network, rpc_url)
        network = registry.resolve(args.network)
        account = load_signer()

        if not args.json:
            print("\n🔄 Revoking EIP-7702 delegation...")
            print(f"Account: {account.address}")
            print(f"Setting delegation to: {ZERO_ADDRESS}")

        result = revoke(connect(network.rpc_url), account, network, gas=args.gas)
    except DelegationCheckError as exc:
        print(f"\n[❌] Error revoking delegation: {exc}", file=sys.stderr)
        return 1

    if args.json:
        json.dump(result.as_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        _print_result(result)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

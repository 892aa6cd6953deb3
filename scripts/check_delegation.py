#!/usr/bin/env python3
"""Report whether one or more accounts carry an EIP-7702 delegation."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from eip7702_delegation.addresses import partition_addresses
from eip7702_delegation.chain import DEFAULT_TIMEOUT, Web3ChainReader
from eip7702_delegation.delegation import DelegationInspector, DelegationRecord
from eip7702_delegation.errors import DelegationCheckError, UnknownNetworkError
from eip7702_delegation.networks import DEFAULT_NETWORK, default_registry

CODE_PREVIEW_LENGTH = 66


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check EIP-7702 delegation status for one or more addresses.",
        epilog=(
            "Examples:\n"
            "  check_delegation.py 0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0\n"
            "  check_delegation.py 0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0 --network base\n"
            "  check_delegation.py 0xAddr1 0xAddr2 0xAddr3 --network sepolia"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("addresses", nargs="+", help="Account addresses (0x followed by 40 hex digits)")
    parser.add_argument(
        "--network",
        default=DEFAULT_NETWORK,
        help="Network to query: mainnet, sepolia, base or baseSepolia (default: %(default)s).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of concurrent RPC reads when checking several addresses.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="RPC request timeout in seconds.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of a formatted report.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging verbosity (DEBUG, INFO, WARNING)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _code_preview(code: str) -> str:
    if len(code) > CODE_PREVIEW_LENGTH:
        return f"{code[:CODE_PREVIEW_LENGTH]}..."
    return code


def _print_single(result: DelegationRecord, explorer_url: Optional[str] = None) -> None:
    print("\n=== EIP-7702 Delegation Check ===")
    print(f"Address: {result.address}")
    print(f"Network: {result.network}")
    if explorer_url:
        print(f"Explorer: {explorer_url}")
    print("================================\n")

    print(f"Status: {'✓ DELEGATED' if result.is_delegated else '✗ NOT DELEGATED'}")
    print(f"Message: {result.message}")

    if result.is_delegated:
        print("\nDelegation Details:")
        print(f"  Delegated To: {result.delegated_to}")
        print(f"  Code: {result.code}")
    elif result.code:
        print(f"\nCode found: {_code_preview(result.code)}")

    print("\n================================\n")


def _print_batch(results: Sequence[DelegationRecord], network: str) -> None:
    print("\n=== Checking Multiple Addresses ===")
    print(f"Network: {network}")
    print(f"Total addresses: {len(results)}")
    print("===================================\n")

    for result in results:
        error = getattr(result, "error", None)
        if error is not None:
            print(f"{result.address}: Error - {error}", file=sys.stderr)
            continue
        print(f"{result.address}: {'✓ Delegated' if result.is_delegated else '✗ Not delegated'}")
        if result.is_delegated:
            print(f"  → {result.delegated_to}")

    print("\n===================================\n")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    load_dotenv()

    addresses, rejected = partition_addresses(args.addresses)
    for error in rejected:
        print(str(error), file=sys.stderr)
    if not addresses:
        print("No valid addresses provided", file=sys.stderr)
        return 1

    registry = default_registry()
    inspector = DelegationInspector(Web3ChainReader(timeout=args.timeout), registry)

    try:
        if len(addresses) == 1:
            results: List[DelegationRecord] = [inspector.check(addresses[0], args.network)]
        else:
            results = inspector.check_many(addresses, args.network, max_workers=args.workers)
    except UnknownNetworkError as exc:
        print(f"[❌] {exc}", file=sys.stderr)
        return 1
    except DelegationCheckError as exc:
        print(f"[❌] Fatal error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        payload = [result.as_dict() for result in results]
        json.dump(payload[0] if len(addresses) == 1 else payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    if len(addresses) == 1:
        _print_single(results[0], registry.resolve(args.network).address_url(addresses[0]))
    else:
        _print_batch(results, args.network)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

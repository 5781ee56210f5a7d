"""Command line interface for DigiByte payment URIs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from .address import AddressResolver, NodeAddressResolver
from .amounts import (
    InvalidAmountError,
    format_friendly,
    format_plain,
    parse_decimal,
)
from .config import ConfigurationError, load_network, load_rpc_config, set_default_config_path
from .errors import ParseFailure, PaymentURIError
from .network import NetworkParameters
from .rpc_client import DigiByteRPCClient, RPCError, RPCTransportError
from .uri import PaymentRequest, build_payment_uri, parse_payment_uri

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Chain names reported by getblockchaininfo for each network.
_NODE_CHAINS = {"mainnet": "main", "testnet": "test"}


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DigiByte payment URI tools")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--network",
        default=None,
        help="Network name (mainnet or testnet); defaults to DGB_NETWORK or the config file",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="parse a payment URI and print it as JSON")
    parse_parser.add_argument("uri", help="digibyte: URI to parse")
    parse_parser.add_argument(
        "--node-check",
        action="store_true",
        help="Confirm the address with a DigiByte node via validateaddress",
    )

    build_cmd = subparsers.add_parser("build", help="build a canonical payment URI")
    build_cmd.add_argument("address", help="Destination DGB address")
    build_cmd.add_argument("--amount", default=None, help="Amount in DGB (decimal)")
    build_cmd.add_argument("--label", default=None, help="Label shown to the payer")
    build_cmd.add_argument("--message", default=None, help="Message shown to the payer")
    build_cmd.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Additional query parameter (repeatable)",
    )

    format_parser = subparsers.add_parser(
        "format", help="render an amount given in smallest units"
    )
    format_parser.add_argument("units", help="Amount in smallest units (integer)")
    format_parser.add_argument(
        "--style",
        choices=("friendly", "plain"),
        default="plain",
        help="friendly keeps two decimals minimum; plain strips trailing zeros",
    )

    units_parser = subparsers.add_parser(
        "to-units", help="convert a decimal DGB amount into smallest units"
    )
    units_parser.add_argument("amount", help="Decimal amount, e.g. 12.5 or 1E-2")
    return parser


def _parse_params(raw_params: Sequence[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for raw in raw_params:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise CLIError(f"--param expects KEY=VALUE, got {raw!r}")
        params[key] = value
    return params


def _parse_units(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise CLIError(f"invalid amount in smallest units: {raw}") from exc


def request_to_dict(request: PaymentRequest) -> dict[str, Any]:
    """Return a JSON-serialisable view of ``request``."""

    return {
        "address": str(request.address),
        "network": request.address.network.name,
        "amount_units": request.amount,
        "amount": format_plain(request.amount) if request.amount is not None else None,
        "label": request.label,
        "message": request.message,
        "extra_parameters": dict(request.extra_parameters),
    }


def _node_resolver(network: NetworkParameters) -> AddressResolver:
    rpc = DigiByteRPCClient(load_rpc_config())
    info = rpc.getblockchaininfo()
    if not isinstance(info, dict):
        raise CLIError("node returned no blockchain info")
    chain = info.get("chain")
    expected = _NODE_CHAINS.get(network.name)
    if expected and chain != expected:
        raise CLIError(f"node is on chain '{chain}' but network {network.name} was requested")
    return NodeAddressResolver(rpc)


def cmd_parse(args: argparse.Namespace, network: NetworkParameters) -> int:
    resolver = _node_resolver(network) if args.node_check else None
    outcome = parse_payment_uri(args.uri, network, resolver=resolver)
    if isinstance(outcome, ParseFailure):
        error = outcome.error
        print(
            json.dumps(
                {"error": error.kind.value, "field": error.field, "message": str(error)},
                indent=2,
            )
        )
        return 1
    print(json.dumps(request_to_dict(outcome.request), indent=2, ensure_ascii=False))
    return 0


def cmd_build(args: argparse.Namespace, network: NetworkParameters) -> int:
    amount = None
    if args.amount is not None:
        amount = parse_decimal(args.amount)
    uri = build_payment_uri(
        args.address,
        amount,
        args.label,
        args.message,
        scheme=network.uri_scheme,
        extra_parameters=_parse_params(args.param),
    )
    print(uri)
    return 0


def cmd_format(args: argparse.Namespace) -> int:
    units = _parse_units(args.units)
    print(format_friendly(units) if args.style == "friendly" else format_plain(units))
    return 0


def cmd_to_units(args: argparse.Namespace) -> int:
    print(parse_decimal(args.amount))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        if args.config:
            set_default_config_path(args.config)
        if args.command == "parse":
            status = cmd_parse(args, load_network(override=args.network))
        elif args.command == "build":
            status = cmd_build(args, load_network(override=args.network))
        elif args.command == "format":
            status = cmd_format(args)
        elif args.command == "to-units":
            status = cmd_to_units(args)
        else:  # pragma: no cover - argparse enforces choices
            raise CLIError(f"Unknown command: {args.command}")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
        return
    except (
        CLIError,
        ConfigurationError,
        RPCError,
        RPCTransportError,
        InvalidAmountError,
        PaymentURIError,
        ValueError,
    ) as exc:
        parser.exit(1, f"error: {exc}\n")
    if status:
        parser.exit(status)


if __name__ == "__main__":
    main(sys.argv[1:])

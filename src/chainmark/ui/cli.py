# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from chainmark.app import (
    append_stage,
    build_coordinator,
    create_product,
    list_products,
    read_by_certification_hash,
    read_product,
)
from chainmark.config import configure_logging
from chainmark.domain.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Record and verify product provenance")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Register a new product")
    create.add_argument("--product-id", required=True, help="Globally unique product id")
    create.add_argument("--name", required=True, help="Product name")
    create.add_argument("--origin", default="", help="Place of origin")
    create.add_argument("--manufacturer", default="", help="Manufacturer name")
    create.add_argument("--wallet", help="Identity of the creating principal")
    create.add_argument(
        "--certificate",
        type=Path,
        help="Certificate file whose content is fingerprinted into the certification hash",
    )
    create.add_argument("--image", help="Reference to an already stored product image")
    create.add_argument(
        "--ref-hash",
        default="",
        help="Existing ledger reference to keep when no certificate is supplied",
    )

    stage = subparsers.add_parser("stage", help="Append a custody-chain stage")
    stage.add_argument("product_id", help="Product id")
    stage.add_argument("stage", help="Stage label, e.g. 'shipped'")

    show = subparsers.add_parser("show", help="Show a product and its ledger state")
    show.add_argument("product_id", help="Product id")

    verify = subparsers.add_parser("verify", help="Look a product up by certification hash")
    verify.add_argument("hash", help="Certification hash or legacy ledger reference")

    subparsers.add_parser("list", help="List all products")

    return parser.parse_args(list(argv))


def _create_fields(args: argparse.Namespace) -> tuple[dict[str, object], bytes | None]:
    fields: dict[str, object] = {
        "productId": args.product_id,
        "name": args.name,
        "origin": args.origin,
        "manufacturer": args.manufacturer,
        "blockchainRefHash": args.ref_hash,
        "createdByWallet": args.wallet,
        "imageFile": args.image,
    }
    certificate: bytes | None = None
    if args.certificate is not None:
        try:
            certificate = args.certificate.read_bytes()
        except OSError as exc:
            raise ValidationError(f"Cannot read certificate {args.certificate}: {exc}") from exc
        fields["certFile"] = str(args.certificate)
    return fields, certificate


def _run(args: argparse.Namespace) -> object:
    coordinator = build_coordinator()
    if args.command == "create":
        fields, certificate = _create_fields(args)
        return create_product(fields, certificate, coordinator=coordinator)
    if args.command == "stage":
        return append_stage(args.product_id, args.stage, coordinator=coordinator)
    if args.command == "show":
        return read_product(args.product_id, coordinator=coordinator)
    if args.command == "verify":
        return read_by_certification_hash(args.hash, coordinator=coordinator)
    if args.command == "list":
        return list_products(coordinator=coordinator)
    raise ValidationError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        payload = _run(parsed_args)
    except ValidationError as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_INVALID)
    except NotFoundError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_NOT_FOUND)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FAILURE)

    print(json.dumps(payload, indent=2))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

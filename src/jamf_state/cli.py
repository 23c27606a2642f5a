#!/usr/bin/env python3
"""jamf-state command line interface.

Usage:
    jamf-state [--manifest FILE] {kinds,preview,apply,wait,initialize} ...

Environment variables:
    JAMF_STATE_MANIFEST     Manifest path (default: ./jamf.yaml)
    JAMF_API_PASSWORD       API password when the manifest does not hold one
    JAMF_STATE_LOG_LEVEL    Console log level (default: INFO)
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

import httpx

from .client import JamfClient, initialize_server, wait_for_connection
from .config.manifest import Manifest
from .engine import ReconcileEngine
from .errors import JamfStateError
from .resources import KINDS
from .utils.audit_log import setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _client(manifest: Manifest) -> JamfClient:
    settings = manifest.connection
    return JamfClient(settings.to_session(), timeout=settings.request_timeout)


def _engine(manifest: Manifest, client: JamfClient) -> ReconcileEngine:
    settings = manifest.connection
    return ReconcileEngine(
        client,
        connect_timeout=settings.timeout,
        auth_token=settings.auth_token,
        cookie=settings.jamf_cookie,
    )


def cmd_kinds(args: argparse.Namespace) -> int:
    for name in sorted(KINDS):
        kind = KINDS[name]
        flags = []
        if kind.singleton:
            flags.append("singleton")
        if kind.wire_format.value == "json":
            flags.append("json")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(f"{name:34s} {kind.path}{suffix}")
    return 0


async def _preview(manifest: Manifest) -> int:
    async with _client(manifest) as client:
        print(await _engine(manifest, client).preview(manifest.resources))
    return 0


async def _apply(manifest: Manifest, args: argparse.Namespace) -> int:
    async with _client(manifest) as client:
        engine = _engine(manifest, client)
        result = await engine.apply_manifest(
            manifest.resources,
            dry_run=args.dry_run,
            stop_on_error=args.stop_on_error,
            user=args.user,
        )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if result.error:
            print(f"Error: {result.error}")
        for r in result.results:
            status = "OK" if r.success else "FAIL"
            print(f"  [{status}] {r.identity}: {r.change_type.value}")
            for line in r.changes_made + r.requests_sent:
                print(f"      {line}")
            if r.error:
                print(f"      Error: {r.error}")
        print(
            f"{'DRY RUN: ' if result.dry_run else ''}{len(result.changed)} changed, "
            f"{len(result.failed)} failed, {len(result.results)} total"
        )
    return 0 if result.success else 1


async def _wait(manifest: Manifest, timeout: Optional[float]) -> int:
    async with _client(manifest) as client:
        await wait_for_connection(client, timeout=timeout or manifest.connection.timeout)
    print(f"Jamf server at {manifest.connection.api_url} is reachable")
    return 0


async def _initialize(manifest: Manifest, args: argparse.Namespace) -> int:
    section = manifest.get_section("initialize")
    institution = args.institution or section.get("institution_name")
    activation_code = args.activation_code or section.get("activation_code")
    email = args.email or section.get("email", "")
    if not institution or not activation_code:
        logger.error("initialize needs an institution name and an activation code")
        return 1

    async with _client(manifest) as client:
        sent = await initialize_server(client, institution, activation_code, email)
    print("Initialized" if sent else "Already initialized")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jamf-state",
        description="Reconcile a Jamf Pro server against a desired state manifest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show what would change
    jamf-state --manifest jamf.yaml preview

    # Apply, planning writes only
    jamf-state apply --dry-run

    # Wait for a freshly installed server, then set it up
    jamf-state wait --timeout 600
    jamf-state initialize --institution "Example Inc" --activation-code XXXX
""",
    )
    parser.add_argument("--manifest", "-m", help="Manifest file (default: search ./jamf.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("kinds", help="List supported resource kinds")
    sub.add_parser("preview", help="Show the changes a manifest would make")

    apply = sub.add_parser("apply", help="Apply a manifest")
    apply.add_argument("--dry-run", action="store_true", help="Plan writes without sending them")
    apply.add_argument("--stop-on-error", action="store_true", help="Stop at the first failed resource")
    apply.add_argument("--json", action="store_true", help="Print the run result as JSON")
    apply.add_argument("--user", help="User name recorded in the audit log")

    wait = sub.add_parser("wait", help="Wait until the server answers its health check")
    wait.add_argument("--timeout", type=float, help="Seconds to wait (default: manifest timeout)")

    init = sub.add_parser("initialize", help="Run first-time setup on a new server")
    init.add_argument("--institution", help="Institution (organization) name")
    init.add_argument("--activation-code", help="Jamf Pro activation code")
    init.add_argument("--email", help="Administrator email address")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    setup_logging()
    setup_audit_logging()
    if args.verbose:
        logging.getLogger("jamf_state").handlers[0].setLevel(logging.DEBUG)

    if args.command == "kinds":
        return cmd_kinds(args)

    try:
        manifest = Manifest.load(args.manifest)
        if args.command == "preview":
            return asyncio.run(_preview(manifest))
        if args.command == "apply":
            return asyncio.run(_apply(manifest, args))
        if args.command == "wait":
            return asyncio.run(_wait(manifest, args.timeout))
        if args.command == "initialize":
            return asyncio.run(_initialize(manifest, args))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except (JamfStateError, FileNotFoundError, httpx.HTTPError) as e:
        logger.error(str(e))
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())

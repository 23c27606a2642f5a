"""Main reconciliation engine - orchestrates the full apply workflow.

Provides a single entry point for:
1. Parsing resource declarations
2. Validating the manifest
3. Gating on the connection validator and opening the session
4. Reading, diffing and writing each resource in turn
"""
import logging
from typing import Any, Optional

import httpx

from ..client import JamfClient, open_session, wait_for_connection
from ..client.session import DEFAULT_CONNECT_TIMEOUT
from ..errors import AuthenticationError, ConnectionValidationError, JamfStateError
from ..resources import get_kind
from ..utils.logging_config import timed_section
from .diff import DiffEngine, summarize_diff
from .executor import ResourceExecutor
from .generator import RequestGenerator
from .normalize import normalize_spec
from .parser import ResourceParser
from .reader import StateReader
from .schema import (
    DiffResult,
    ExecuteOptions,
    ExecuteResult,
    InstanceState,
    ResourceSpec,
    RunResult,
    ValidationResult,
)
from .validator import ManifestValidator

logger = logging.getLogger(__name__)


class ReconcileEngine:
    """
    Reconciliation engine for applying desired state manifests.

    Usage:
        async with JamfClient(session) as client:
            engine = ReconcileEngine(client)
            result = await engine.apply_manifest(records, dry_run=True)
    """

    def __init__(
        self,
        client: JamfClient,
        connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
        auth_token: Optional[str] = None,
        cookie: Optional[str] = None,
    ):
        """
        Initialize the engine.

        Args:
            client: HTTP client bound to the run's session
            connect_timeout: Connection validator timeout in seconds. None
                treats the connection as already validated.
            auth_token: Explicit token instead of fetching one
            cookie: Explicit affinity cookie instead of fetching one
        """
        self.client = client
        self.connect_timeout = connect_timeout
        self.auth_token = auth_token
        self.cookie = cookie
        self.parser = ResourceParser(is_cloud=client.session.is_cloud)
        self.validator = ManifestValidator(api_url=client.session.api_url)
        self.reader = StateReader(client)
        self.diff_engine = DiffEngine()
        self.generator = RequestGenerator()
        self.executor = ResourceExecutor(client)
        self._connected = False

    async def connect(self) -> None:
        """Run the connection validator, then fetch token and cookie.

        Raises:
            ConnectionValidationError: The server never became reachable.
            AuthenticationError: The server is initialized but gave no token.
        """
        if self._connected:
            return
        if self.connect_timeout is not None:
            await wait_for_connection(self.client, timeout=self.connect_timeout)
        if not self.client.session.authenticated:
            await open_session(self.client, auth_token=self.auth_token, cookie=self.cookie)
        self._connected = True

    def parse(self, records: list[dict[str, Any]]) -> tuple[list[ResourceSpec], ValidationResult]:
        """Parse and validate declarations without touching the network."""
        specs: list[ResourceSpec] = []
        errors: list[str] = []
        for index, record in enumerate(records):
            try:
                specs.append(self.parser.parse(record))
            except (JamfStateError, ValueError) as e:
                label = record.get("name", f"#{index}") if isinstance(record, dict) else f"#{index}"
                errors.append(f"resource {label}: {e}")

        validation = self.validator.validate(specs)
        validation.errors[:0] = errors
        validation.valid = not validation.errors
        return specs, validation

    async def read(self, spec: ResourceSpec) -> InstanceState:
        """Read current state for a spec (for external use)."""
        await self.connect()
        return await self.reader.read(get_kind(spec.kind), spec)

    async def diff(self, spec: ResourceSpec) -> DiffResult:
        """Read and diff one spec; nothing is written."""
        kind = get_kind(spec.kind)
        desired = normalize_spec(kind, spec)
        await self.connect()
        current = await self.reader.read(kind, desired)
        return self.diff_engine.calculate(kind, desired, current)

    async def reconcile(self, spec: ResourceSpec, options: ExecuteOptions) -> ExecuteResult:
        """
        Converge one resource: read fully, then diff, then write.

        Errors from the server end this resource's pass and are reported in
        the result rather than raised.
        """
        kind = get_kind(spec.kind)
        result = ExecuteResult(kind=spec.kind, name=spec.name, dry_run=options.dry_run)

        async with timed_section("reconcile", resource=spec.identity):
            try:
                diff = await self.diff(spec)
                if diff.no_change:
                    result.success = True
                    logger.info(f"{spec.identity} in sync")
                    return result

                logger.info(f"{spec.identity}: {diff.change_type.value} ({diff.total_changes} attributes)")
                references = {}
                if kind.lookups and diff.change_type.value in ("create", "modify"):
                    references = await self.reader.resolve_references(kind, diff.spec.attributes)
                requests = self.generator.generate(
                    kind, diff, self.client.session.api_url, references
                )
                return await self.executor.execute(diff, requests, options)
            except (JamfStateError, httpx.HTTPError) as e:
                logger.error(f"{spec.identity} failed: {e}")
                result.error = str(e)
                return result

    async def apply_manifest(
        self,
        records: list[dict[str, Any]],
        dry_run: bool = False,
        stop_on_error: bool = False,
        user: Optional[str] = None,
    ) -> RunResult:
        """
        Apply a list of resource declarations.

        This is the main entry point. It:
        1. Parses and validates every declaration (no network)
        2. Runs the connection validator; failure blocks every resource
        3. Reconciles resources one at a time, in manifest order

        Args:
            records: Resource declarations
            dry_run: If True, plan writes without sending them
            stop_on_error: Stop at the first failed resource
            user: User identifier for the audit log

        Returns:
            RunResult with one ExecuteResult per reconciled resource
        """
        run = RunResult(dry_run=dry_run)

        # Step 1: Parse and validate
        specs, validation = self.parse(records)
        if not validation.valid:
            run.error = f"Validation failed: {'; '.join(validation.errors)}"
            return run
        for warning in validation.warnings:
            logger.warning(warning)

        # Step 2: Connection gate
        try:
            await self.connect()
        except (ConnectionValidationError, AuthenticationError) as e:
            gate = "connection validator" if isinstance(e, ConnectionValidationError) else "authentication"
            run.error = str(e)
            run.results = [
                ExecuteResult(
                    kind=s.kind,
                    name=s.name,
                    dry_run=dry_run,
                    error=f"Blocked: {gate} failed ({e})",
                )
                for s in specs
            ]
            return run

        # Step 3: Reconcile
        options = ExecuteOptions(dry_run=dry_run, stop_on_error=stop_on_error, user=user)
        async with timed_section("apply_manifest", resources=len(specs), dry_run=dry_run):
            for spec in specs:
                result = await self.reconcile(spec, options)
                result.warnings = [w for w in validation.warnings if w.startswith(spec.identity)]
                run.results.append(result)
                if not result.success and stop_on_error:
                    logger.warning(f"Stopping after failure of {spec.identity}")
                    break

        logger.info(
            f"{'DRY RUN: ' if dry_run else ''}{len(run.changed)} changed, "
            f"{len(run.failed)} failed, {len(run.results)} total"
        )
        return run

    async def preview(self, records: list[dict[str, Any]]) -> str:
        """
        Preview changes without applying.

        Returns human-readable diff summary.
        """
        specs, validation = self.parse(records)
        if not validation.valid:
            return "Validation failed:\n" + "\n".join(validation.errors)

        await self.connect()

        lines = []
        for spec in specs:
            try:
                diff = await self.diff(spec)
            except (JamfStateError, httpx.HTTPError) as e:
                lines.append(f"  [!] {spec.identity}: {e}")
                continue
            lines.append(summarize_diff(diff))

        summary = "\n".join(lines) if lines else "No resources declared"

        if validation.warnings:
            summary += "\n\nWarnings:\n" + "\n".join(
                f"  - {w}" for w in validation.warnings
            )
        return summary

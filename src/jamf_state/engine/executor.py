"""Executor for sending write plans to the server.

Writes are sent once, in order. A failed write is terminal for that
resource's pass and is never retried; re-running the manifest is the
recovery path. Every write, including dry runs, lands in the audit log.
"""
import logging

from ..client import JamfClient
from ..errors import APIError
from ..utils.audit_log import log_change
from .schema import (
    DiffResult,
    ExecuteOptions,
    ExecuteResult,
    WriteRequest,
)

logger = logging.getLogger(__name__)


class ResourceExecutor:
    """Send the writes of one resource."""

    def __init__(self, client: JamfClient):
        self.client = client

    async def execute(
        self,
        diff: DiffResult,
        requests: list[WriteRequest],
        options: ExecuteOptions
    ) -> ExecuteResult:
        """
        Execute a request plan.

        Args:
            diff: Diff the plan was generated from (for reporting)
            requests: Writes to send
            options: Execution options (dry_run, etc.)

        Returns:
            ExecuteResult with success/failure and details
        """
        spec = diff.spec
        result = ExecuteResult(
            kind=spec.kind,
            name=spec.name,
            dry_run=options.dry_run,
            change_type=diff.change_type,
        )
        changes = self._extract_changes(diff)
        user = options.user or "system"

        # DRY RUN MODE
        if options.dry_run:
            return self._dry_run(diff, requests, result, changes, user)

        for request in requests:
            logger.info(f"{request.describe()} ({spec.identity})")
            try:
                await self.client.request(
                    request.method,
                    request.url,
                    body=request.body,
                    content_type=request.content_type,
                )
            except APIError as e:
                logger.error(f"{request.describe()} failed for {spec.identity}: {e}")
                result.success = False
                result.error = str(e)
                log_change(
                    spec.kind, spec.name, diff.change_type.value, request.method,
                    request.url, success=False, changes=changes, error=str(e), user=user,
                )
                return result

            result.requests_sent.append(request.describe())
            log_change(
                spec.kind, spec.name, diff.change_type.value, request.method,
                request.url, success=True, changes=changes, user=user,
            )

        result.changes_made = changes
        result.success = True
        return result

    def _dry_run(
        self,
        diff: DiffResult,
        requests: list[WriteRequest],
        result: ExecuteResult,
        changes: list[str],
        user: str,
    ) -> ExecuteResult:
        """Handle dry-run mode - preview without sending."""
        spec = diff.spec
        result.success = True
        result.requests_sent = [f"[DRY-RUN] {r.describe()}" for r in requests]
        result.changes_made = [f"[PREVIEW] {change}" for change in changes]
        for request in requests:
            log_change(
                spec.kind, spec.name, diff.change_type.value, request.method,
                request.url, success=True, changes=changes, dry_run=True, user=user,
            )
        return result

    def _extract_changes(self, diff: DiffResult) -> list[str]:
        """Human-readable change descriptions from a diff."""
        identity = diff.spec.identity
        if diff.change_type.value == "create":
            return [f"Created {identity}"] + [
                f"  {c.name}={'<sensitive>' if c.sensitive else repr(c.desired)}"
                for c in diff.changes
            ]
        if diff.change_type.value == "delete":
            return [f"Deleted {identity} (id {diff.current.id})"]
        if diff.change_type.value == "modify":
            return [f"Modified {identity}: {c.describe()}" for c in diff.changes]
        return []

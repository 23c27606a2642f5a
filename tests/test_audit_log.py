"""Tests for the audit log."""
import json

from jamf_state.utils.audit_log import (
    ChangeRecord,
    get_recent_changes,
    log_change,
    setup_audit_logging,
)


class TestAuditLog:
    """Tests for writing and reading audit records."""

    def test_log_and_read_back(self, tmp_path):
        """Logged changes are read back most recent first."""
        audit_file = setup_audit_logging(str(tmp_path / "audit.log"))
        log_change("category", "A", "create", "POST", "https://j/JSSResource/categories/id/0", True)
        log_change("policy", "B", "modify", "PUT", "https://j/JSSResource/policies/id/4", False,
                   error="HTTP 409")

        records = get_recent_changes(audit_file)
        assert [r.name for r in records] == ["B", "A"]
        assert records[0].error == "HTTP 409"
        assert records[0].success is False

    def test_filters(self, tmp_path):
        """Records can be filtered by kind and name."""
        audit_file = setup_audit_logging(str(tmp_path / "audit.log"))
        log_change("category", "A", "create", "POST", "u1", True)
        log_change("category", "B", "create", "POST", "u2", True)
        log_change("policy", "A", "delete", "DELETE", "u3", True)

        assert len(get_recent_changes(audit_file, kind="category")) == 2
        assert [r.kind for r in get_recent_changes(audit_file, name="A")] == ["policy", "category"]
        assert len(get_recent_changes(audit_file, limit=1)) == 1

    def test_malformed_lines_skipped(self, tmp_path):
        """Garbage lines in the file are ignored."""
        audit_file = tmp_path / "audit.log"
        good = ChangeRecord(
            timestamp="2026-01-01T00:00:00+00:00", kind="category", name="A",
            operation="create", method="POST", url="u", user="system",
            dry_run=False, success=True, changes=[],
        )
        audit_file.write_text("not json\n\n" + good.to_json() + "\n")
        records = get_recent_changes(str(audit_file))
        assert len(records) == 1

    def test_missing_file(self, tmp_path):
        """A missing log reads as empty."""
        assert get_recent_changes(str(tmp_path / "nope.log")) == []

    def test_record_is_one_json_line(self, tmp_path):
        """Each record is a single JSON object without request bodies."""
        audit_file = setup_audit_logging(str(tmp_path / "audit.log"))
        log_change("account", "bob", "modify", "PUT", "u", True,
                   changes=["Modified account/bob: password: <sensitive> changed"])

        lines = (tmp_path / "audit.log").read_text().splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["kind"] == "account"
        assert "body" not in data
        assert audit_file == str(tmp_path / "audit.log")

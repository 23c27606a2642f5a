"""Tests for manifest loading."""
import pytest

from jamf_state.config import ConnectionSettings, Manifest, find_manifest
from jamf_state.errors import ParseError


class TestManifest:
    """Tests for Manifest."""

    @pytest.fixture
    def manifest_file(self, tmp_path):
        """Create a manifest file for testing."""
        path = tmp_path / "jamf.yaml"
        path.write_text("""
connection:
  api_url: https://jamf.example.com:8443
  api_username: admin
  api_password_env: TEST_JAMF_PASSWORD
  is_cloud: false
  timeout: 60

defaults:
  ensure: present

initialize:
  institution_name: Example Inc
  activation_code: ABCD-1234

resources:
  - kind: category
    name: Utilities
    priority: 9

  - kind: department
    name: Old Department
    ensure: absent

  - kind: smtp_server
    enabled: false
""")
        return str(path)

    def test_load(self, manifest_file):
        """Manifest loads connection and resources."""
        m = Manifest.load(manifest_file)
        assert m.path == manifest_file
        assert m.connection.api_url == "https://jamf.example.com:8443"
        assert m.connection.timeout == 60
        assert len(m.resources) == 3

    def test_defaults_merged(self, manifest_file):
        """Defaults fill keys a resource does not set."""
        m = Manifest.load(manifest_file)
        assert m.resources[0]["ensure"] == "present"
        # Explicit values win
        assert m.resources[1]["ensure"] == "absent"

    def test_resources_of_kind(self, manifest_file):
        """Resources can be filtered by kind."""
        m = Manifest.load(manifest_file)
        assert [r["name"] for r in m.resources_of_kind("category")] == ["Utilities"]

    def test_get_section(self, manifest_file):
        """Extra top-level sections are available raw."""
        m = Manifest.load(manifest_file)
        assert m.get_section("initialize")["institution_name"] == "Example Inc"
        assert m.get_section("missing") == {}

    def test_password_from_env(self, manifest_file, monkeypatch):
        """The password is read from the configured environment variable."""
        monkeypatch.setenv("TEST_JAMF_PASSWORD", "from-env")
        session = Manifest.load(manifest_file).connection.to_session()
        assert session.password == "from-env"
        assert session.username == "admin"
        assert session.api_url == "https://jamf.example.com:8443"

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML raises ParseError."""
        path = tmp_path / "broken.yaml"
        path.write_text("resources: [unclosed")
        with pytest.raises(ParseError):
            Manifest.load(str(path))

    def test_resources_must_be_list(self):
        """A mapping under resources is rejected."""
        with pytest.raises(ParseError):
            Manifest({"resources": {"kind": "category"}})

    def test_resource_entries_must_be_mappings(self):
        """Scalar resource entries are rejected."""
        with pytest.raises(ParseError):
            Manifest({"resources": ["category"]})

    def test_empty_manifest(self, tmp_path):
        """An empty file is an empty manifest with default connection."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        m = Manifest.load(str(path))
        assert m.resources == []
        assert m.connection.api_url == "https://127.0.0.1:8443"


class TestConnectionSettings:
    """Tests for ConnectionSettings."""

    def test_explicit_password_wins(self, monkeypatch):
        """A password in the manifest beats the environment."""
        monkeypatch.setenv("JAMF_API_PASSWORD", "from-env")
        settings = ConnectionSettings(api_password="inline")
        assert settings.get_password() == "inline"

    def test_default_env_variable(self, monkeypatch):
        """JAMF_API_PASSWORD is the default source."""
        monkeypatch.setenv("JAMF_API_PASSWORD", "from-env")
        assert ConnectionSettings().get_password() == "from-env"

    def test_unknown_keys_rejected(self):
        """Misspelled settings are errors."""
        with pytest.raises(ParseError) as exc_info:
            ConnectionSettings.from_dict({"api_urll": "x"})
        assert "api_urll" in str(exc_info.value)


class TestFindManifest:
    """Tests for manifest discovery."""

    def test_env_variable(self, monkeypatch, tmp_path):
        """JAMF_STATE_MANIFEST wins."""
        monkeypatch.setenv("JAMF_STATE_MANIFEST", str(tmp_path / "custom.yaml"))
        assert find_manifest() == str(tmp_path / "custom.yaml")

    def test_current_directory(self, monkeypatch, tmp_path):
        """./jamf.yaml is found."""
        monkeypatch.delenv("JAMF_STATE_MANIFEST", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "jamf.yaml").write_text("resources: []\n")
        assert find_manifest() == str(tmp_path / "jamf.yaml")

    def test_not_found(self, monkeypatch, tmp_path):
        """No manifest anywhere raises FileNotFoundError."""
        monkeypatch.delenv("JAMF_STATE_MANIFEST", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        with pytest.raises(FileNotFoundError):
            find_manifest()

"""Tests for the configuration module."""

import pytest
from pydantic import ValidationError

from ontap_workflow.config import ClientConfig, OntapTarget, load_config
from ontap_workflow.exceptions import ConfigurationError


class TestOntapTarget:
    """Tests for OntapTarget model."""

    def test_valid_target(self, sample_target):
        """Test creating a valid target."""
        assert sample_target.host == "cluster1.example.com"
        assert sample_target.username == "admin"
        assert sample_target.password == "netapp123"
        assert sample_target.port == 8443
        assert sample_target.allow_insecure_tls is True

    def test_defaults(self):
        """Test default port and TLS verification."""
        target = OntapTarget(host="cluster1", username="admin", password="pw")
        assert target.port == 443
        assert target.allow_insecure_tls is False
        assert target.base_url == "https://cluster1:443"

    def test_host_required(self):
        """Test a blank host is rejected."""
        with pytest.raises(ValidationError):
            OntapTarget(host="  ")

    @pytest.mark.parametrize("host", ["cluster1:8443", "https://cluster1", "cluster1/api", "admin@cluster1"])
    def test_host_must_be_bare(self, host):
        """Test hosts carrying a scheme, port, path or userinfo are rejected."""
        with pytest.raises(ValidationError):
            OntapTarget(host=host)

    @pytest.mark.parametrize("host", ["fd00::10", "[fd00::10]"])
    def test_ipv6_host(self, host):
        """Test IPv6 hosts are accepted and bracketed in the base URL."""
        target = OntapTarget(host=host, port=8443)
        assert target.host == "fd00::10"
        assert target.base_url == "https://[fd00::10]:8443"

    def test_invalid_port(self):
        """Test ports outside 1-65535 are rejected."""
        with pytest.raises(ValidationError):
            OntapTarget(host="cluster1", port=70000)

    def test_password_not_in_repr(self):
        """Test the password is hidden from repr."""
        target = OntapTarget(host="cluster1", username="admin", password="s3cret")
        assert "s3cret" not in repr(target)


class TestClientConfig:
    """Tests for ClientConfig model."""

    def test_default_values(self):
        """Test default values for client configuration."""
        config = ClientConfig()
        assert config.log_level == "INFO"
        assert config.log_json is False
        assert config.job_timeout == 300000
        assert config.poll_interval == 2000
        assert config.max_pages is None

    def test_custom_log_level(self, sample_client_config):
        """Test custom log level."""
        assert sample_client_config.log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            ClientConfig(log_level="VERBOSE")


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_config_from_env(self, env_without_target, env_with_target):
        """Test loading configuration from environment variables."""
        config = load_config()
        assert config.target is not None
        assert config.target.host == "cluster1.example.com"
        assert config.target.port == 8443
        assert config.target.username == "admin"
        assert config.target.allow_insecure_tls is True

    def test_load_config_without_target(self, env_without_target):
        """Test loading configuration without a host leaves the target unset."""
        config = load_config()
        assert config.target is None
        assert config.client.request_timeout == 30000

    def test_load_client_settings(self, env_without_target, monkeypatch):
        """Test job and pagination settings are read from the environment."""
        monkeypatch.setenv("JOB_TIMEOUT", "60000")
        monkeypatch.setenv("JOB_POLL_INTERVAL", "500")
        monkeypatch.setenv("ONTAP_MAX_PAGES", "25")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = load_config()
        assert config.client.job_timeout == 60000
        assert config.client.poll_interval == 500
        assert config.client.max_pages == 25
        assert config.client.log_level == "DEBUG"

    def test_invalid_port(self, env_with_target, monkeypatch):
        """Test a non-numeric port is a configuration error."""
        monkeypatch.setenv("ONTAP_PORT", "https")

        with pytest.raises(ConfigurationError):
            load_config()

    def test_env_file(self, env_without_target, tmp_path, monkeypatch):
        """Test values are read from an explicit .env file."""
        # load_dotenv writes os.environ directly; register the names so they are removed afterwards
        for var in ("ONTAP_HOST", "ONTAP_USERNAME"):
            monkeypatch.setenv(var, "")
            monkeypatch.delenv(var)
        env_file = tmp_path / ".env"
        env_file.write_text("ONTAP_HOST=cluster2.example.com\nONTAP_USERNAME=vsadmin\n")

        config = load_config(str(env_file))

        assert config.target.host == "cluster2.example.com"
        assert config.target.username == "vsadmin"

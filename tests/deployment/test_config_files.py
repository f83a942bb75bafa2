"""Tests for .env and docker-compose.yml generation."""

import datetime
import os
import stat
from unittest.mock import patch

import pytest
import yaml

from synovault.deployment.config_files import (
    FileAction,
    backup_path_for,
    prepare_data_directory,
    read_env_values,
    read_published_port,
    render_template,
    write_compose_file,
    write_env_file,
)
from synovault.errors import InstallCancelled


@pytest.fixture
def data_dir(install_config):
    install_config.data_dir.mkdir(parents=True)
    return install_config.data_dir


class TestEnvFile:
    """Tests for the environment record."""

    def test_contains_domain_and_token_verbatim(self, install_config, data_dir, always_yes):
        outcome = write_env_file(install_config, always_yes)

        assert outcome.action is FileAction.CREATED
        lines = install_config.env_file.read_text().splitlines()
        assert "DOMAIN=https://vault.example.org" in lines
        assert "ADMIN_TOKEN=test-admin-token" in lines

    def test_default_keys(self, install_config, data_dir, always_yes):
        write_env_file(install_config, always_yes)
        content = install_config.env_file.read_text()

        assert "WEB_VAULT_ENABLED=true" in content
        assert "SIGNUPS_ALLOWED=true" in content
        assert "# INVITATIONS_ALLOWED=true" in content
        assert "# DATABASE_URL=/data/db.sqlite3" in content
        assert "LOG_FILE=/data/vaultwarden.log" in content
        assert "LOG_LEVEL=info" in content
        for key in ("SMTP_HOST", "SMTP_FROM", "SMTP_PORT", "SMTP_SECURITY", "SMTP_USERNAME", "SMTP_PASSWORD"):
            assert f"# {key}=" in content

    def test_permissions_restricted_to_owner(self, install_config, data_dir, always_yes):
        write_env_file(install_config, always_yes)

        mode = stat.S_IMODE(install_config.env_file.stat().st_mode)
        assert mode == 0o600

    def test_token_never_written_to_readable_file(self, install_config, data_dir, always_yes):
        """An overwritten world-readable record is restricted before the token lands."""
        install_config.env_file.write_text("ADMIN_TOKEN=old\n")
        os.chmod(install_config.env_file, 0o644)
        modes_at_write = []
        real_fdopen = os.fdopen

        class RecordingFile:
            def __init__(self, f):
                self._f = f

            def __enter__(self):
                self._f.__enter__()
                return self

            def __exit__(self, *exc):
                return self._f.__exit__(*exc)

            def fileno(self):
                return self._f.fileno()

            def write(self, text):
                modes_at_write.append(stat.S_IMODE(os.fstat(self._f.fileno()).st_mode))
                return self._f.write(text)

        with patch("os.fdopen", side_effect=lambda fd, mode: RecordingFile(real_fdopen(fd, mode))):
            write_env_file(install_config, always_yes)

        assert modes_at_write == [0o600]
        assert stat.S_IMODE(install_config.env_file.stat().st_mode) == 0o600
        assert "ADMIN_TOKEN=test-admin-token" in install_config.env_file.read_text()

    def test_domain_is_not_validated(self, install_config, data_dir, always_yes):
        config = install_config.replace(domain="not a url & <odd>")
        write_env_file(config, always_yes)

        assert "DOMAIN=not a url & <odd>" in config.env_file.read_text()

    def test_decline_keeps_existing_bytes(self, install_config, data_dir, always_no):
        install_config.env_file.write_bytes(b"DOMAIN=https://old.example\nADMIN_TOKEN=old\n")

        outcome = write_env_file(install_config, always_no)

        assert outcome.action is FileAction.KEPT
        assert install_config.env_file.read_bytes() == b"DOMAIN=https://old.example\nADMIN_TOKEN=old\n"
        assert list(data_dir.glob(".env.backup.*")) == []

    def test_overwrite_creates_backup(self, install_config, data_dir, always_yes):
        install_config.env_file.write_text("DOMAIN=https://old.example\n")

        outcome = write_env_file(install_config, always_yes)

        assert outcome.action is FileAction.REPLACED
        assert outcome.backup is not None
        assert outcome.backup.read_text() == "DOMAIN=https://old.example\n"
        assert "DOMAIN=https://vault.example.org" in install_config.env_file.read_text()

    def test_prompt_key(self, install_config, data_dir):
        install_config.env_file.write_text("x")
        asked = []

        write_env_file(install_config, lambda key, message: asked.append(key) or False)

        assert asked == ["overwrite_env"]


class TestComposeFile:
    """Tests for the deployment descriptor."""

    def test_descriptor_fields(self, install_config, data_dir, always_yes):
        write_compose_file(install_config, always_yes)

        descriptor = yaml.safe_load(install_config.compose_file.read_text())
        service = descriptor["services"]["vaultwarden"]

        assert service["image"] == "vaultwarden/server:latest"
        assert service["container_name"] == "vaultwarden"
        assert service["restart"] == "unless-stopped"
        assert service["env_file"] == [".env"]
        assert service["volumes"] == ["./data:/data"]
        assert service["ports"] == ["9000:80"]
        assert service["environment"] == ["TZ=Europe/Berlin"]

    def test_healthcheck(self, install_config, data_dir, always_yes):
        write_compose_file(install_config, always_yes)

        descriptor = yaml.safe_load(install_config.compose_file.read_text())
        healthcheck = descriptor["services"]["vaultwarden"]["healthcheck"]

        assert healthcheck["test"] == ["CMD", "curl", "-f", "http://localhost:80/alive"]
        assert healthcheck["interval"] == "30s"
        assert healthcheck["timeout"] == "10s"
        assert healthcheck["retries"] == 3
        assert healthcheck["start_period"] == "10s"

    def test_permissions(self, install_config, data_dir, always_yes):
        write_compose_file(install_config, always_yes)

        assert stat.S_IMODE(install_config.compose_file.stat().st_mode) == 0o644

    def test_overwrite_backs_up_previous(self, install_config, data_dir, always_yes):
        install_config.compose_file.write_text("services: {}\n")

        outcome = write_compose_file(install_config, always_yes)

        assert outcome.action is FileAction.REPLACED
        backups = list(data_dir.glob("docker-compose.yml.backup.*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "services: {}\n"

    def test_render_is_deterministic_apart_from_timestamp(self, install_config):
        first = render_template("docker-compose.yml.j2", install_config)
        second = render_template("docker-compose.yml.j2", install_config)

        assert yaml.safe_load(first) == yaml.safe_load(second)


class TestDataDirectory:
    """Tests for data directory preparation."""

    def test_creates_missing_directory(self, install_config, always_no):
        created = prepare_data_directory(install_config, always_no)

        assert created is True
        assert install_config.data_dir.is_dir()
        assert stat.S_IMODE(install_config.data_dir.stat().st_mode) == 0o755

    def test_existing_directory_accepted(self, install_config, data_dir, always_yes):
        assert prepare_data_directory(install_config, always_yes) is False

    def test_existing_directory_declined_cancels(self, install_config, data_dir, always_no):
        with pytest.raises(InstallCancelled):
            prepare_data_directory(install_config, always_no)


class TestBackupPath:
    def test_timestamp_suffix(self, tmp_path):
        target = tmp_path / ".env"
        now = datetime.datetime(2024, 3, 9, 14, 5, 7)

        assert backup_path_for(target, now).name == ".env.backup.20240309_140507"

    def test_never_clobbers_existing_backup(self, tmp_path):
        target = tmp_path / ".env"
        now = datetime.datetime(2024, 3, 9, 14, 5, 7)
        (tmp_path / ".env.backup.20240309_140507").write_text("older")

        assert backup_path_for(target, now).name == ".env.backup.20240309_140507_1"


class TestReadEnvValues:
    def test_reads_active_keys_only(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DOMAIN=https://a.example\nADMIN_TOKEN=abc+/==\n# SMTP_HOST=smtp\n")

        values = read_env_values(env_file)

        assert values["DOMAIN"] == "https://a.example"
        assert values["ADMIN_TOKEN"] == "abc+/=="
        assert "SMTP_HOST" not in values

    def test_missing_file(self, tmp_path):
        assert read_env_values(tmp_path / ".env") == {}


class TestReadPublishedPort:
    def test_generated_descriptor(self, install_config, data_dir, always_yes):
        write_compose_file(install_config, always_yes)

        assert read_published_port(install_config.compose_file, "vaultwarden") == 9000

    @pytest.mark.parametrize(
        "ports, expected",
        [
            (['"127.0.0.1:8443:80"'], 8443),
            (['"8081:80/tcp"'], 8081),
            (['"3012:3012"', '"8082:80"'], 8082),
            (["{target: 80, published: 8083}"], 8083),
            (['"80"'], None),
        ],
    )
    def test_port_syntaxes(self, tmp_path, ports, expected):
        descriptor = tmp_path / "docker-compose.yml"
        entries = "\n".join(f"      - {entry}" for entry in ports)
        descriptor.write_text(f"services:\n  vaultwarden:\n    ports:\n{entries}\n")

        assert read_published_port(descriptor, "vaultwarden") == expected

    def test_named_service_preferred(self, tmp_path):
        descriptor = tmp_path / "docker-compose.yml"
        descriptor.write_text(
            "services:\n"
            "  proxy:\n    ports:\n      - \"8443:80\"\n"
            "  vw:\n    ports:\n      - \"9001:80\"\n"
        )

        assert read_published_port(descriptor, "vw") == 9001
        assert read_published_port(descriptor, "other") == 8443

    def test_missing_or_invalid(self, tmp_path):
        descriptor = tmp_path / "docker-compose.yml"
        assert read_published_port(descriptor, "vaultwarden") is None

        descriptor.write_text("services: [\n")
        assert read_published_port(descriptor, "vaultwarden") is None

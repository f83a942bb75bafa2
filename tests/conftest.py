"""
Pytest configuration and shared test utilities.

Provides a fake Docker runtime and common installer fixtures so workflow
tests never touch a real container engine, network or clock.
"""

from pathlib import Path

import pytest
import yaml

from synovault.utils.config import InstallConfig

# ===================================================================
# Fake runtime
# ===================================================================


class FakeRuntime:
    """In-memory stand-in for :class:`RuntimeClient`.

    Records every call in ``calls`` as tuples, e.g. ``("stop", "vaultwarden")``.
    """

    def __init__(
        self,
        containers: list[str] | None = None,
        compose_cmd: list[str] | None = ("docker", "compose"),
        pull_ok: bool = True,
        start_ok: bool = True,
        published_ports: dict[str, int] | None = None,
    ):
        self.containers = list(containers or [])
        self._compose_cmd = list(compose_cmd) if compose_cmd else None
        self.pull_ok = pull_ok
        self.start_ok = start_ok
        self.published_ports = dict(published_ports or {})
        self.calls: list[tuple] = []

    def is_installed(self) -> bool:
        return True

    def is_running(self) -> bool:
        return True

    def published_port(self, name: str, container_port: int) -> int | None:
        self.calls.append(("port", name))
        return self.published_ports.get(name)

    def pull_image(self, image: str) -> bool:
        self.calls.append(("pull", image))
        return self.pull_ok

    def list_containers(self, all_containers: bool = True) -> list[str]:
        return list(self.containers)

    def container_exists(self, name: str) -> bool:
        return name in self.containers

    def stop(self, name: str) -> bool:
        self.calls.append(("stop", name))
        return True

    def remove(self, name: str) -> bool:
        self.calls.append(("remove", name))
        if name in self.containers:
            self.containers.remove(name)
        self.published_ports.pop(name, None)
        return True

    def compose_command(self) -> list[str] | None:
        return list(self._compose_cmd) if self._compose_cmd else None

    def run_declarative(self, compose_cmd: list[str], compose_file: Path) -> bool:
        self.calls.append(("compose_up", tuple(compose_cmd), compose_file))
        if self.start_ok:
            self.containers.append("vaultwarden")
            if compose_file.exists():
                service = yaml.safe_load(compose_file.read_text())["services"]["vaultwarden"]
                self.published_ports["vaultwarden"] = int(service["ports"][0].split(":")[0])
        return self.start_ok

    def run_direct(
        self,
        name,
        image,
        env_file,
        volumes,
        ports,
        environment=None,
        restart="unless-stopped",
    ) -> bool:
        self.calls.append(("run", name, image, tuple(volumes), tuple(ports)))
        if self.start_ok:
            self.containers.append(name)
            self.published_ports[name] = int(ports[0].split(":")[0])
        return self.start_ok

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    """Keep a developer's SYNOVAULT_CONFIG out of the tests."""
    monkeypatch.delenv("SYNOVAULT_CONFIG", raising=False)


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def install_config(tmp_path):
    """Installation config rooted in a temporary directory."""
    return InstallConfig(
        data_dir=tmp_path / "vaultwarden",
        domain="https://vault.example.org",
        port=9000,
        admin_token="test-admin-token",
        timezone="Europe/Berlin",
        startup_delay=0,
    )


@pytest.fixture
def always_yes():
    return lambda key, message: True


@pytest.fixture
def always_no():
    return lambda key, message: False


class FakeSleep:
    """Records requested sleep durations instead of sleeping."""

    def __init__(self):
        self.durations: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.durations.append(seconds)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def make_runtime():
    """Factory for FakeRuntime with custom behavior."""
    return FakeRuntime

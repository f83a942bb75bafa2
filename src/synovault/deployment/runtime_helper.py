"""Docker CLI access for the installer.

Detects the available compose front-end and wraps the handful of Docker
commands the installer needs behind :class:`RuntimeClient`, so the lifecycle
code can be exercised against a fake client in tests.

Compose detection order:
    1. The standalone ``docker-compose`` binary (older Synology packages)
    2. The ``docker compose`` plugin (Container Manager, Docker 20.10+)

Examples:
    Basic usage::

        from synovault.deployment.runtime_helper import RuntimeClient

        runtime = RuntimeClient()
        runtime.compose_command()
        # Returns: ['docker-compose'], ['docker', 'compose'] or None
"""

import shutil
import subprocess
from pathlib import Path

from synovault.utils.logger import get_logger

logger = get_logger("runtime")

DEFAULT_TIMEOUT = 30


class RuntimeClient:
    """Thin wrapper over the Docker command line.

    Every method returns plain values (booleans, lists of names) rather than
    raising; callers decide which failures are fatal.
    """

    def __init__(self, runtime: str = "docker"):
        self.runtime = runtime
        self._compose_cmd: list[str] | None = None
        self._compose_detected = False

    def _run(
        self,
        args: list[str],
        cwd: Path | None = None,
        capture: bool = True,
        timeout: int | None = DEFAULT_TIMEOUT,
    ) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(args)}")
        return subprocess.run(args, cwd=cwd, capture_output=capture, text=True, timeout=timeout)

    def is_installed(self) -> bool:
        return shutil.which(self.runtime) is not None

    def is_running(self) -> bool:
        """Check that the daemon answers ``docker info``."""
        try:
            return self._run([self.runtime, "info"]).returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def published_port(self, name: str, container_port: int) -> int | None:
        """Host port mapped to ``container_port`` of a container (``docker port``)."""
        try:
            result = self._run([self.runtime, "port", name, str(container_port)])
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None
        if result.returncode != 0:
            return None
        # One "host_ip:port" line per address family, e.g. "[::]:8000"
        for line in result.stdout.splitlines():
            port = line.strip().rpartition(":")[2]
            if port.isdigit():
                return int(port)
        return None

    def pull_image(self, image: str) -> bool:
        """Pull an image, streaming progress to the terminal."""
        try:
            result = self._run([self.runtime, "pull", image], capture=False, timeout=None)
        except FileNotFoundError:
            return False
        return result.returncode == 0

    def list_containers(self, all_containers: bool = True) -> list[str]:
        """Return container names, including stopped ones by default."""
        cmd = [self.runtime, "ps"]
        if all_containers:
            cmd.append("-a")
        cmd.extend(["--format", "{{.Names}}"])

        try:
            result = self._run(cmd)
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return []
        if result.returncode != 0:
            logger.warning(f"Could not list containers: {result.stderr.strip()}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def container_exists(self, name: str) -> bool:
        return name in self.list_containers(all_containers=True)

    def stop(self, name: str) -> bool:
        try:
            return self._run([self.runtime, "stop", name], timeout=60).returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def remove(self, name: str) -> bool:
        try:
            return self._run([self.runtime, "rm", name]).returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def compose_command(self) -> list[str] | None:
        """Detect the compose front-end, caching the result per client.

        Returns:
            ``['docker-compose']``, ``['docker', 'compose']`` or ``None``
        """
        if self._compose_detected:
            return self._compose_cmd.copy() if self._compose_cmd else None

        self._compose_detected = True

        if shutil.which("docker-compose"):
            self._compose_cmd = ["docker-compose"]
        else:
            try:
                result = self._run([self.runtime, "compose", "version"], timeout=5)
                if result.returncode == 0:
                    self._compose_cmd = [self.runtime, "compose"]
            except (subprocess.TimeoutExpired, FileNotFoundError):
                pass

        if self._compose_cmd:
            logger.debug(f"Compose command: {' '.join(self._compose_cmd)}")
        return self._compose_cmd.copy() if self._compose_cmd else None

    def run_declarative(self, compose_cmd: list[str], compose_file: Path) -> bool:
        """Start services from a compose file (``up -d``) in its directory."""
        cmd = [*compose_cmd, "-f", compose_file.name, "up", "-d"]
        logger.info(f"Running command:\n    {' '.join(cmd)}")
        try:
            result = self._run(cmd, cwd=compose_file.parent, capture=False, timeout=None)
        except FileNotFoundError:
            return False
        return result.returncode == 0

    def run_direct(
        self,
        name: str,
        image: str,
        env_file: Path,
        volumes: list[str],
        ports: list[str],
        environment: list[str] | None = None,
        restart: str = "unless-stopped",
    ) -> bool:
        """Start a single container with ``docker run -d``."""
        cmd = [self.runtime, "run", "-d", "--name", name, "--restart", restart]
        cmd.extend(["--env-file", str(env_file)])
        for volume in volumes:
            cmd.extend(["-v", volume])
        for port in ports:
            cmd.extend(["-p", port])
        for variable in environment or []:
            cmd.extend(["-e", variable])
        cmd.append(image)

        logger.info(f"Running command:\n    {' '.join(cmd)}")
        try:
            result = self._run(cmd, capture=False, timeout=None)
        except FileNotFoundError:
            return False
        return result.returncode == 0

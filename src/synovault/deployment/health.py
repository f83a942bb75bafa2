"""Readiness verification for the Vaultwarden container.

Polls the ``/alive`` endpoint on the published host port at a fixed cadence
(2 seconds, 30 attempts by default, so about one minute). Exhausting the
attempts is reported, not raised: the container may still be starting.

:func:`poll_until_healthy` takes the probe and the sleep function as
arguments so the polling loop can be driven without a network or a clock.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from synovault.utils.config import InstallConfig
from synovault.utils.logger import get_logger

logger = get_logger("health")

DEFAULT_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 30
PROBE_TIMEOUT = 5.0


@dataclass(frozen=True)
class HealthResult:
    """Result of a readiness poll."""

    healthy: bool
    attempts: int


def http_probe(url: str, timeout: float = PROBE_TIMEOUT) -> bool:
    """Return True if ``GET url`` answers with a 2xx status."""
    try:
        response = httpx.get(url, timeout=timeout)
    except httpx.HTTPError:
        return False
    return response.is_success


def poll_until_healthy(
    probe: Callable[[], bool],
    interval: float = DEFAULT_INTERVAL,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    on_attempt: Callable[[int, int], None] | None = None,
) -> HealthResult:
    """Probe until success or until ``max_attempts`` probes have failed.

    Args:
        probe: Returns True once the service is ready
        interval: Seconds slept between consecutive probes
        max_attempts: Upper bound on the number of probes
        sleep: Sleep function
        on_attempt: Called as ``on_attempt(attempt, max_attempts)`` after each
            failed probe

    Returns:
        HealthResult with the number of probes performed
    """
    for attempt in range(1, max_attempts + 1):
        if probe():
            return HealthResult(healthy=True, attempts=attempt)
        if on_attempt is not None:
            on_attempt(attempt, max_attempts)
        if attempt < max_attempts:
            sleep(interval)
    return HealthResult(healthy=False, attempts=max_attempts)


def verify_installation(
    config: InstallConfig,
    probe: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> HealthResult:
    """Wait for the container to answer its liveness endpoint."""
    logger.key_info("Verifying installation...")

    if probe is None:
        url = config.health_url

        def probe():
            return http_probe(url)

    def report(attempt: int, total: int) -> None:
        logger.info(f"Waiting for Vaultwarden to start (attempt {attempt}/{total})...")

    result = poll_until_healthy(
        probe,
        interval=config.health_interval,
        max_attempts=config.health_attempts,
        sleep=sleep,
        on_attempt=report,
    )

    if result.healthy:
        logger.success("Vaultwarden is running and healthy!")
    else:
        logger.warning("Could not verify Vaultwarden is running.")
        logger.info(f"Check container logs with: docker logs {config.container_name}")
    return result

"""SynoVault - Vaultwarden provisioning for Synology NAS.

Installs a Vaultwarden server container on a Docker host:

- Preflight checks (privileges, platform, container runtime)
- Configuration materialization (.env, docker-compose.yml)
- Image acquisition and container lifecycle
- Health verification and operator summary
"""

# Version information
__version__ = "0.3.1"

__all__ = ["__version__"]

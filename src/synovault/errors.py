"""Exception hierarchy for the SynoVault installer.

Library code raises these; the CLI layer catches them, prints an error marker
through the Rich console and exits with a non-zero status. Declined
overwrite/replace prompts are *not* errors and never raise.

.. seealso::
   :mod:`synovault.cli.install_cmd` : Maps these exceptions to exit codes
"""


class InstallerError(Exception):
    """Base exception for all installer errors.

    Every error that should terminate the installation derives from this
    class, so the CLI can handle the whole family with a single clause.
    """

    pass


class ConfigError(InstallerError):
    """Raised when the installer configuration file is invalid."""

    pass


class PreflightError(InstallerError):
    """Exception for failed preconditions.

    Raised when the process lacks root privileges, or when the Docker CLI is
    missing or its daemon is not responding.
    """

    pass


class SecretGenerationError(InstallerError):
    """Raised when no cryptographically secure randomness source is available."""

    pass


class ImagePullError(InstallerError):
    """Raised when the container image cannot be pulled."""

    pass


class LifecycleError(InstallerError):
    """Exception for container lifecycle failures.

    Raised when the container cannot be started, or when the lifecycle
    strategy persisted for this installation can no longer be honored.
    """

    pass


class InstallCancelled(InstallerError):
    """Raised when the operator declines to continue with an existing data directory."""

    pass

"""Admin token generation.

The admin token protects Vaultwarden's ``/admin`` panel. It is 48 bytes of
OS-provided CSPRNG output, base64-encoded (64 characters), the same shape as
``openssl rand -base64 48``.

There is no fallback: if the operating system cannot supply
secure randomness, generation fails and the operator must pass a token
explicitly.
"""

import base64
import secrets

from synovault.errors import SecretGenerationError
from synovault.utils.logger import get_logger

logger = get_logger("token")

TOKEN_BYTES = 48


def generate_admin_token(num_bytes: int = TOKEN_BYTES) -> str:
    """Generate a base64-encoded admin token.

    Args:
        num_bytes: Bytes of entropy; 48 unless the caller asks for more

    Returns:
        Base64 text of ``num_bytes`` random bytes

    Raises:
        SecretGenerationError: If no secure randomness source is available
    """
    try:
        raw = secrets.token_bytes(num_bytes)
    except NotImplementedError as e:
        # os.urandom raises this when the platform has no entropy source
        raise SecretGenerationError(
            "Cannot generate secure token. Please provide --admin-token"
        ) from e

    logger.debug(f"Generated admin token from {num_bytes} random bytes")
    return base64.b64encode(raw).decode("ascii")


def resolve_admin_token(supplied: str | None) -> str:
    """Return the supplied token, or a freshly generated one when it is empty."""
    if supplied:
        return supplied
    return generate_admin_token()

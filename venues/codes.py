# venues/codes.py
import logging
import secrets

from django.conf import settings

from core.constants import INVITATION_CODE_ALPHABET
from core.errors import CodeGenerationFailed

logger = logging.getLogger("gigboard.venues")


def normalize_code(code: str) -> str:
    """Codes are typed by hand; compare them case-insensitively."""
    return (code or "").strip().upper()


def generate_code(length: int | None = None) -> str:
    length = length or getattr(settings, "INVITATION_CODE_LENGTH", 8)
    return "".join(secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(length))


def generate_unique_code(model, max_attempts: int | None = None) -> str:
    """
    Draw codes until one is not already used by ``model``.

    The unique constraint on invitation_code still guards the insert; this
    loop only keeps collisions from surfacing to the user.

    Raises:
        CodeGenerationFailed: If every attempt collided.
    """
    max_attempts = max_attempts or getattr(settings, "INVITATION_CODE_MAX_ATTEMPTS", 10)

    for attempt in range(1, max_attempts + 1):
        code = generate_code()
        if not model.objects.filter(invitation_code=code).exists():
            return code
        logger.debug(f"Invitation code collision: model={model.__name__}, attempt={attempt}")

    logger.error(f"Invitation code generation exhausted {max_attempts} attempts for {model.__name__}")
    raise CodeGenerationFailed()

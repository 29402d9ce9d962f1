# users/services.py
import logging

from core.constants import INSTRUMENTS
from core.errors import ValidationError
from .models import Musician

logger = logging.getLogger("gigboard")

PROFILE_FIELDS = ("first_name", "last_name", "email", "phone", "instruments")


def provided(fields: dict | None) -> dict:
    """
    Keep only the profile fields that were actually filled in. Blank strings
    and empty lists count as "not provided" so they never wipe data.
    """
    result = {}
    for key in PROFILE_FIELDS:
        value = (fields or {}).get(key)
        if isinstance(value, str):
            value = value.strip()
        if value in (None, "", []):
            continue
        result[key] = value
    return result


def _full_name(fields: dict) -> str:
    return " ".join(p for p in (fields.get("first_name"), fields.get("last_name")) if p).strip()


def _validate_instruments(instruments):
    unknown = [i for i in instruments if i not in INSTRUMENTS]
    if unknown:
        raise ValidationError(f"Unknown instrument: {', '.join(unknown)}")
    return list(instruments)


def ensure_musician(user, overrides: dict | None = None, fallback: dict | None = None):
    """
    Make sure ``user`` has a musician profile.

    New profile: each field comes from ``overrides``, then ``fallback``
    (e.g. an invitation's prefilled contact), then the user's own account.
    Existing profile: only fields explicitly present in ``overrides`` are
    written; the fallback never overwrites what the musician already has.

    Returns (musician, created).
    """
    overrides = provided(overrides)
    fallback = provided(fallback)

    if "instruments" in overrides:
        overrides["instruments"] = _validate_instruments(overrides["instruments"])

    musician = Musician.objects.filter(user=user).first()

    if musician is None:
        merged = {**fallback, **overrides}
        name = (
            _full_name(merged)
            or user.get_full_name()
            or (user.email or "").split("@")[0]
            or "Musician"
        )
        musician = Musician.objects.create(
            user=user,
            name=name,
            email=merged.get("email") or user.email or "",
            phone=merged.get("phone"),
            instruments=list(merged.get("instruments") or []),
        )
        logger.info(f"Musician profile created: user={user.id}, musician={musician.id}")
        return musician, True

    changed = []
    name = _full_name(overrides)
    if name and name != musician.name:
        musician.name = name
        changed.append("name")
    for field in ("email", "phone", "instruments"):
        if field in overrides and overrides[field] != getattr(musician, field):
            setattr(musician, field, overrides[field])
            changed.append(field)

    if changed:
        musician.save(update_fields=changed + ["updated_at"])
        logger.info(f"Musician profile updated: user={user.id}, fields={changed}")

    return musician, False

"""Identifier helpers shared by all aggregate factories."""

from uuid import UUID, uuid4

from shared.domain.errors import InvalidIdError


def resolve_id(raw, error_cls=InvalidIdError) -> UUID:
    """
    Resolve an externally supplied identifier

    - None or a blank string generates a new UUID
    - A UUID instance is returned unchanged
    - A string is parsed; a malformed one raises `error_cls`
    """
    if isinstance(raw, UUID):
        return raw
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return uuid4()
    try:
        return UUID(str(raw).strip())
    except ValueError:
        raise error_cls(f"Invalid id: {raw!r}")


def is_blank_id(value) -> bool:
    """True for a missing id or the nil UUID."""
    return value is None or value == UUID(int=0)


def require_id(raw, error_cls=InvalidIdError) -> UUID:
    """Parse an identifier that must reference an existing aggregate."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise error_cls("Id is required")
    parsed = resolve_id(raw, error_cls)
    if is_blank_id(parsed):
        raise error_cls("Id is required")
    return parsed

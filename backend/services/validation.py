from functools import partial
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from models.kinds import EntityKind, get_kind

Validator = Callable[[dict[str, Any]], dict[str, Any]]


def _format_error(err: dict) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


def _defaults(kind: type[EntityKind], data: dict[str, Any]) -> dict[str, Any]:
    # only fields the caller left out whose descriptor carries a real default
    return {
        name: field.default
        for name, field in kind.model_fields.items()
        if name not in data and not field.is_required() and field.default is not None
    }


def validate_payload(kind: type[EntityKind], data: dict[str, Any]) -> dict[str, Any]:
    """Check `data` against the kind; the stored payload is the caller's values plus defaults."""
    try:
        kind.model_validate(data)
    except PydanticValidationError as exc:
        errors = [_format_error(err) for err in exc.errors()]
        raise ValidationError(
            f"Invalid {kind.kind_name} payload: " + "; ".join(errors),
            errors,
        ) from exc

    return {**data, **_defaults(kind, data)}


def validator_for(entity_type: str) -> Validator | None:
    kind = get_kind(entity_type)
    if kind is None:
        return None
    return partial(validate_payload, kind)

"""
Partial-update validation for updateUser / updateSystemSettings.

An "updates" mapping coming from the agent is checked against the target
model before anything touches the store:

- every key must be a declared field of the model (camelCase alias or
  snake_case name); anything else is rejected,
- every value must validate against that field's type,
- keys are normalised to the stored camelCase alias and values to their
  JSON form.

The result is a plain dict ready to shallow-merge over the stored record.
"""

from functools import lru_cache
from typing import Any, Dict, FrozenSet, Tuple, Type

from pydantic import BaseModel, TypeAdapter, ValidationError

from tutor_admin.core.exceptions import InvalidArguments


@lru_cache(maxsize=None)
def _field_index(model: Type[BaseModel]) -> Dict[str, Tuple[str, Any]]:
    """Map every accepted key (alias and attribute name) to (alias, annotation)."""
    index: Dict[str, Tuple[str, Any]] = {}
    for name, field in model.model_fields.items():
        alias = field.alias or name
        index[alias] = (alias, field.annotation)
        index[name] = (alias, field.annotation)
    return index


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def allowed_fields(model: Type[BaseModel]) -> list[str]:
    """Stored (camelCase) field names a patch may set."""
    return sorted({alias for alias, _ in _field_index(model).values()})


def validate_patch(
    model: Type[BaseModel],
    updates: Dict[str, Any],
    forbidden: FrozenSet[str] = frozenset(),
) -> Dict[str, Any]:
    """
    Validate and normalise a partial update.

    Args:
        model: Pydantic model describing the stored record
        updates: Raw field -> value mapping from the caller
        forbidden: Stored field names that may never be patched (e.g. "id")

    Returns:
        Dict keyed by stored field name with JSON-ready values

    Raises:
        InvalidArguments: empty patch, unknown or forbidden field, bad value
    """
    if not updates:
        raise InvalidArguments("updates must name at least one field")

    index = _field_index(model)
    unknown = sorted(key for key in updates if key not in index)
    if unknown:
        raise InvalidArguments(
            f"Unknown field(s) for {model.__name__}: {', '.join(unknown)}"
        )

    patch: Dict[str, Any] = {}
    for key, value in updates.items():
        alias, annotation = index[key]
        if alias in forbidden:
            raise InvalidArguments(f"Field '{alias}' cannot be updated")

        adapter = _adapter(annotation)
        try:
            validated = adapter.validate_python(value)
        except ValidationError as e:
            first = e.errors()[0]
            raise InvalidArguments(
                f"Invalid value for '{alias}': {first.get('msg', 'validation failed')}"
            ) from e

        patch[alias] = adapter.dump_python(validated, mode="json", by_alias=True)

    return patch

"""
Snapshot Merge

Applies the data extracted from one conversation turn to the accumulated
workshop snapshot. Pure: the existing snapshot is never modified.

Policy per field:
- scalars: the update wins when present and not null
- nested records: merged field by field
- lists: replaced, except the keyed lists below which are united by key
  (existing order kept, new keys appended, update wins on collision)
- records still lacking required fields: kept as drafts until complete
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union, get_args

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from finanzplan.base import FinanzModel
from finanzplan.exceptions import ValidationError

from .snapshot import DRAFT_MODELS, FinanzplanSnapshot, as_validation_error, missing_fields

logger = logging.getLogger(__name__)


# Lists merged as a keyed union; all other lists are replaced
UNION_KEYS = {
    "investitionen": ("name",),
    "quellen": ("typ", "bezeichnung"),
    "fixkosten": ("name",),
}


# =============================================================================
# Key normalization
# =============================================================================

def _model_type(annotation: Any) -> Optional[Type[FinanzModel]]:
    """Record class inside an annotation such as Optional[List[Investition]]."""
    if isinstance(annotation, type) and issubclass(annotation, FinanzModel):
        return annotation
    for arg in get_args(annotation):
        found = _model_type(arg)
        if found is not None:
            return found
    return None


def _field_names(model: Type[FinanzModel]) -> Dict[str, str]:
    lookup = {}
    for name, info in model.model_fields.items():
        lookup[name] = name
        lookup[to_camel(name)] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


def _normalize_value(model: Optional[Type[FinanzModel]], value: Any) -> Any:
    if model is None or value is None:
        return value
    if isinstance(value, FinanzModel):
        return value.model_dump(mode="json", exclude_unset=True)
    if isinstance(value, Mapping):
        return normalize_keys(model, value)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(model, item) for item in value]
    return value


def normalize_keys(model: Type[FinanzModel], data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Rename camelCase or snake_case keys to field names, recursively.

    Unknown keys raise ValidationError so a misspelled field is never
    silently dropped.
    """
    lookup = _field_names(model)
    normalized = {}
    for key, value in data.items():
        name = lookup.get(key)
        if name is None:
            raise ValidationError(f"Unbekanntes Feld '{key}' in {model.__name__}", key)
        nested = _model_type(model.model_fields[name].annotation)
        normalized[name] = _normalize_value(nested, value)
    return normalized


# =============================================================================
# Merge
# =============================================================================

def _key_part(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return value.strip()
    return value


def _item_key(item: Any, fields: Sequence[str]) -> Optional[Tuple]:
    if not isinstance(item, Mapping):
        return None
    parts = tuple(_key_part(item.get(field)) for field in fields)
    if any(part is None for part in parts):
        return None
    return parts


def _union(existing: List[Any], update: List[Any], fields: Sequence[str]) -> List[Any]:
    merged = list(existing)
    positions = {}
    for index, item in enumerate(merged):
        key = _item_key(item, fields)
        if key is not None:
            positions.setdefault(key, index)

    for item in update:
        key = _item_key(item, fields)
        if key is not None and key in positions:
            index = positions[key]
            merged[index] = _merge(merged[index], item)
            continue
        if key is not None:
            positions[key] = len(merged)
        merged.append(item)
    return merged


def _merge(existing: Any, update: Any, field: Optional[str] = None) -> Any:
    if update is None:
        return existing
    if isinstance(existing, Mapping) and isinstance(update, Mapping):
        merged = dict(existing)
        for key, value in update.items():
            if value is None:
                continue
            merged[key] = _merge(existing.get(key), value, key)
        return merged
    if isinstance(existing, list) and isinstance(update, list) and field in UNION_KEYS:
        return _union(existing, update, UNION_KEYS[field])
    return update


def merge_snapshot(
    existing: Optional[FinanzplanSnapshot],
    update: Union[FinanzplanSnapshot, Mapping[str, Any], None],
) -> FinanzplanSnapshot:
    """
    Merge one turn's update into the snapshot and return a new snapshot.

    The update may be a partial mapping in camelCase or snake_case, or a
    snapshot whose explicitly set fields are applied. A record that still
    lacks required fields is kept in entwuerfe and completed by later turns;
    a present but invalid value raises ValidationError.
    """
    base = {}
    if existing is not None:
        base = existing.model_dump(mode="json", exclude={"entwuerfe"})
        for name, draft in existing.entwuerfe.items():
            base[name] = normalize_keys(DRAFT_MODELS[name], draft)

    if update is None:
        changes = {}
    elif isinstance(update, FinanzModel):
        changes = update.model_dump(mode="json", exclude_unset=True, exclude={"entwuerfe"})
    else:
        changes = normalize_keys(FinanzplanSnapshot, update)
        if "entwuerfe" in changes:
            raise ValidationError("entwuerfe kann nicht direkt gesetzt werden", "entwuerfe")

    merged = _merge(base, changes)

    drafts = {}
    for name, model in DRAFT_MODELS.items():
        data = merged.get(name)
        if data is not None and missing_fields(model, data, name):
            drafts[name] = data
            merged[name] = None
    merged["entwuerfe"] = drafts

    try:
        snapshot = FinanzplanSnapshot.model_validate(merged)
    except PydanticValidationError as e:
        raise as_validation_error(e.errors()[0]) from e

    logger.debug(f"Snapshot merged: {sorted(changes.keys())}, drafts: {sorted(drafts)}")
    return snapshot

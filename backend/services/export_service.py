import json
from typing import Any

import pandas as pd

EXPORT_FORMATS = {"csv", "json"}


def _clean_value(value: Any):
    if isinstance(value, float) and (value != value or value in (float("inf"), float("-inf"))):
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


def entities_to_csv(entities: list[dict[str, Any]]) -> bytes:
    """
    Flatten entity dicts into one CSV. Columns are the union of all keys,
    metadata first; nested payload values are written as JSON text.
    """
    df = pd.DataFrame([{k: _clean_value(v) for k, v in item.items()} for item in entities])
    leading = [c for c in ("id", "created_at", "updated_at") if c in df.columns]
    df = df[leading + [c for c in df.columns if c not in leading]]
    df = df.astype(object).where(pd.notnull(df), None)
    return df.to_csv(index=False).encode("utf-8")


def entities_to_json(entities: list[dict[str, Any]]) -> bytes:
    return json.dumps(entities, default=str).encode("utf-8")


def export_entities(entities: list[dict[str, Any]], fmt: str) -> tuple[bytes, str]:
    if fmt == "json":
        return entities_to_json(entities), "application/json"
    return entities_to_csv(entities), "text/csv"

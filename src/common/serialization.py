"""Serialization utilities."""

from dataclasses import asdict, fields, is_dataclass
from datetime import datetime


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes to ISO strings."""
    data = {f.name: getattr(obj, f.name) for f in fields(obj)}
    for key, value in data.items():
        if is_dataclass(value) and not isinstance(value, type):
            data[key] = asdict(value)
        elif isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, dict):
            data[key] = {
                k: v.isoformat() if isinstance(v, datetime) else v
                for k, v in value.items()
            }
    return data

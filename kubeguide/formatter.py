"""Tidying of Kubernetes objects before they are shown to the user."""

from __future__ import annotations

from typing import Any


def clean_data(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``obj`` without ``metadata.managedFields``.

    Raises KeyError if the object has no metadata and TypeError if the
    metadata is not a mapping.
    """
    metadata = obj["metadata"]
    if not isinstance(metadata, dict):
        raise TypeError("object metadata must be a mapping")
    cleaned = dict(obj)
    cleaned["metadata"] = {
        key: value for key, value in metadata.items() if key != "managedFields"
    }
    return cleaned
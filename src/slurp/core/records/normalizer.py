"""Reduce raw PNX records to a flat shape suitable for analytics."""

from typing import Any

from slurp.models.event import NormalizedRecord

_MISSING = object()


def _get_path(obj: Any, path: str, default: Any = None) -> Any:
    """Look up a dotted path like ``pnx.control.recordid.0`` in nested dicts/lists."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else _MISSING
        else:
            current = _MISSING
        if current is _MISSING:
            return default
    return current


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _unique(values: Any) -> tuple[Any, ...]:
    """De-duplicate by equality, keeping first-occurrence order."""
    unique: list[Any] = []
    for value in _as_list(values):
        if value not in unique:
            unique.append(value)
    return tuple(unique)


def record_id(record: Any) -> str | None:
    """Return the record id of a raw record, or None."""
    return _get_path(record, "pnx.control.recordid.0")


def normalize_record(record: Any) -> NormalizedRecord:
    """Project a raw record onto a NormalizedRecord.

    Missing fields become None or empty tuples. Classification codes
    (Dewey, Humord, Realfagstermer) are de-duplicated.
    """
    return NormalizedRecord(
        id=record_id(record),
        is_local=_get_path(record, "context") == "L",
        source_adds_id=_get_path(record, "pnx.control.addsrcrecordid.0"),
        source_system=_get_path(record, "pnx.control.sourcesystem.0"),
        dewey_terms=_unique(_get_path(record, "pnx.facets.lfc10", [])),
        humord_terms=_unique(_get_path(record, "pnx.facets.lfc14", [])),
        realfag_terms=_unique(_get_path(record, "pnx.facets.lfc20", [])),
        resource_types=tuple(_as_list(_get_path(record, "pnx.facets.rsrctype", []))),
        display_type=_get_path(record, "pnx.display.type.0"),
        title=_get_path(record, "pnx.display.title.0"),
    )

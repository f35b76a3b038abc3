from __future__ import annotations
from typing import Dict, Any, Iterable, List
from .model import FetchResult, GenericValue, Map


def to_plain(objects: Iterable[GenericValue]) -> List[Any]:
    """Convert records to plain dict / list / str values."""
    return [obj.to_plain() for obj in objects]


def _select(obj: GenericValue, wanted: set[str]) -> Any:
    if isinstance(obj, Map):
        return {k: v.to_plain() for k, v in obj.entries.items() if k in wanted}
    return obj.to_plain()


def result_asdict(res: FetchResult, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict, optionally keeping only some record keys."""
    if not res.success or res.objects is None:
        return {"success": False, "error": res.error, "bytes_fetched": res.bytes_fetched}
    if fields:
        wanted = set(fields)
        objects = [_select(obj, wanted) for obj in res.objects]
    else:
        objects = to_plain(res.objects)
    return {"success": True, "objects": objects, "bytes_fetched": res.bytes_fetched}

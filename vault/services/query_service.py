"""Filter, sort and recency projections over a record collection.

Every function here is pure: the input collection is never mutated, and the
same arguments always give the same output sequence. Malformed filter or
sort input degrades to "no constraint" instead of raising.
"""

import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from common.constants import RECENT_VIEW_LIMIT
from vault.domain import FileRecord
from vault.utils import ensure_aware


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class FilterSpec:
    """
    All clauses are AND-ed; a clause left as ``None`` or empty imposes no
    constraint. ``tags`` matches records carrying at least one of the tags.
    """
    search_term: Optional[str] = None
    file_types: Optional[Sequence[str]] = None
    date_range: Optional[DateRange] = None
    tags: Optional[Sequence[str]] = None
    only_favorites: bool = False
    only_shared: bool = False
    only_encrypted: bool = False


@dataclass(frozen=True)
class SortSpec:
    sort_by: str = "date"
    direction: str = "desc"


def collation_key(text: str):
    """
    Locale-independent stand-in for locale-aware comparison: accents and
    case are folded first, the raw text breaks the remaining ties.
    """
    text = text if isinstance(text, str) else ""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return (folded, text)


def _as_string_set(values, lower: bool = False) -> Optional[set]:
    if isinstance(values, str):
        values = [values]
    if not values:
        return None
    try:
        items = [v for v in values if isinstance(v, str) and v]
    except TypeError:
        return None
    result = {v.lower() if lower else v for v in items}
    return result or None


def _as_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return ensure_aware(value)
    return None


def _coerce_spec(value, spec_type):
    """
    ``value`` as an instance of ``spec_type``. Mappings are read field by
    field; anything else is treated as absent.
    """
    if isinstance(value, spec_type):
        return value
    if isinstance(value, Mapping):
        names = {f.name for f in fields(spec_type)}
        return spec_type(**{k: v for k, v in value.items() if k in names})
    return None


def build_predicate(filter_spec: Optional[FilterSpec]) -> Callable[[FileRecord], bool]:
    """Compile a filter spec into a single predicate over records."""
    filter_spec = _coerce_spec(filter_spec, FilterSpec)
    if filter_spec is None:
        return lambda record: True

    term = filter_spec.search_term
    term = term.lower() if isinstance(term, str) and term else None
    file_types = _as_string_set(filter_spec.file_types, lower=True)
    tags = _as_string_set(filter_spec.tags)

    start = end = None
    if isinstance(filter_spec.date_range, DateRange):
        start = _as_datetime(filter_spec.date_range.start)
        end = _as_datetime(filter_spec.date_range.end)

    only_favorites = filter_spec.only_favorites is True
    only_shared = filter_spec.only_shared is True
    only_encrypted = filter_spec.only_encrypted is True

    def predicate(record: FileRecord) -> bool:
        if term is not None and term not in record.name.lower():
            return False
        if file_types is not None and record.type.lower() not in file_types:
            return False
        if start is not None or end is not None:
            created_at = ensure_aware(record.metadata.created_at)
            if start is not None and created_at < start:
                return False
            if end is not None and created_at > end:
                return False
        if tags is not None and not any(tag in tags for tag in record.tags):
            return False
        if only_favorites and not record.is_favorite:
            return False
        if only_shared and not record.is_shared:
            return False
        if only_encrypted and not record.is_encrypted:
            return False
        return True

    return predicate


_SORT_KEYS: Dict[str, Callable[[FileRecord], object]] = {
    "name": lambda record: collation_key(record.name),
    "size": lambda record: record.size,
    "date": lambda record: ensure_aware(record.metadata.modified_at),
    "type": lambda record: collation_key(record.type),
}


def filter_records(records: Iterable[FileRecord], filter_spec: Optional[FilterSpec]) -> List[FileRecord]:
    predicate = build_predicate(filter_spec)
    return [record for record in records if predicate(record)]


def sort_records(records: Iterable[FileRecord], sort_spec: Optional[SortSpec]) -> List[FileRecord]:
    """
    Stable sort. Descending order reverses the comparison only, so equal
    elements keep their incoming order in both directions. An unknown sort
    field leaves the order untouched; any direction other than ``"asc"``
    sorts descending.
    """
    result = list(records)
    sort_spec = _coerce_spec(sort_spec, SortSpec)
    if sort_spec is None or not isinstance(sort_spec.sort_by, str):
        return result

    key = _SORT_KEYS.get(sort_spec.sort_by)
    if key is None:
        return result

    result.sort(key=key, reverse=sort_spec.direction != "asc")
    return result


def apply_view(
    records: Iterable[FileRecord],
    filter_spec: Optional[FilterSpec] = None,
    sort_spec: Optional[SortSpec] = None,
) -> List[FileRecord]:
    """Filter then sort, returning a new list."""
    return sort_records(filter_records(records, filter_spec), sort_spec)


list_view = apply_view


def recent_view(records: Iterable[FileRecord], limit: int = RECENT_VIEW_LIMIT) -> List[FileRecord]:
    """
    The ``limit`` most recently created records, newest first. Independent of
    any active filter or sort. ``None`` means the default size.
    """
    if limit is None:
        limit = RECENT_VIEW_LIMIT
    if not isinstance(limit, int) or limit <= 0:
        return []
    ordered = sorted(records, key=lambda record: ensure_aware(record.metadata.created_at), reverse=True)
    return ordered[:limit]

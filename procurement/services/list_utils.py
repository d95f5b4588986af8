"""Shared helpers for filtering, sorting, pagination and CSV export.

These utilities centralise common logic used by the admin list screens
(master catalog, custom requests, payouts, supplier performance). Records
arrive from the backend as lists of dictionaries, so filtering and sorting
happen in memory over the loaded rows, driven by standard ``request.GET``
parameters.
"""

from __future__ import annotations

import csv
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from django.core.paginator import Paginator
from django.http import HttpRequest, HttpResponse

Row = Mapping[str, Any]
FilterMapping = Mapping[str, str]


def _sort_key(field: str) -> Callable[[Row], Any]:
    def key(row: Row) -> Any:
        value = row.get(field)
        return value.lower() if isinstance(value, str) else value

    return key


def apply_filters_sort(
    request: HttpRequest,
    rows: Iterable[Row],
    *,
    search_fields: Sequence[str] | None = None,
    filter_fields: FilterMapping | None = None,
    allowed_sorts: Iterable[str] | None = None,
    default_sort: str = "id",
    default_direction: str = "asc",
) -> Tuple[List[Row], Dict[str, Any]]:
    """Return ``rows`` filtered and sorted based on ``request`` parameters.

    Parameters
    ----------
    request:
        The current request whose ``GET`` parameters are inspected.
    rows:
        Records to operate on.
    search_fields:
        Field names searched by the ``q`` parameter (case-insensitive
        substring match on any field).
    filter_fields:
        Mapping of GET parameter names to record keys for exact matching
        (e.g. ``{"status": "status"}``). The value ``ALL`` disables a filter.
    allowed_sorts:
        Iterable of field names allowed for sorting.
    default_sort:
        Field to sort by if the provided value is invalid or missing.
    default_direction:
        ``"asc"`` or ``"desc"`` for default order direction.

    Returns
    -------
    Tuple[List[Row], Dict[str, Any]]
        The filtered and sorted rows plus a dictionary of the resolved
        parameters that can be fed back into templates.
    """

    params: Dict[str, Any] = {}
    result = list(rows)

    if search_fields:
        q = (request.GET.get("q") or "").strip()
        if q:
            needle = q.lower()
            result = [
                row
                for row in result
                if any(needle in str(row.get(field) or "").lower() for field in search_fields)
            ]
        params["q"] = q

    for param, field in (filter_fields or {}).items():
        value = (request.GET.get(param) or "").strip()
        if value and value.upper() != "ALL":
            result = [row for row in result if str(row.get(field) or "") == value]
        params[param] = value

    allowed = set(allowed_sorts or [])
    allowed.add(default_sort)
    sort = (request.GET.get("sort") or default_sort).strip()
    direction = (request.GET.get("direction") or default_direction).strip().lower()
    if sort not in allowed:
        sort = default_sort
    if direction not in {"asc", "desc"}:
        direction = default_direction
    # Empty values always sort last.
    present = [row for row in result if row.get(sort) not in (None, "")]
    missing = [row for row in result if row.get(sort) in (None, "")]
    present.sort(key=_sort_key(sort), reverse=direction == "desc")
    result = present + missing
    params.update({"sort": sort, "direction": direction})
    return result, params


def paginate(
    request: HttpRequest,
    rows: Sequence[Any],
    *,
    default_page_size: int = 25,
    page_param: str = "page",
    page_size_param: str = "page_size",
):
    """Paginate ``rows`` based on ``request`` parameters."""

    try:
        per_page = int(request.GET.get(page_size_param, default_page_size))
    except (TypeError, ValueError):
        per_page = default_page_size
    if per_page < 1:
        per_page = default_page_size
    paginator = Paginator(rows, per_page)
    page_number = request.GET.get(page_param)
    page_obj = paginator.get_page(page_number)
    return page_obj, per_page


def export_as_csv(
    rows: Iterable[Any],
    headers: Sequence[str],
    row_builder: Callable[[Any], Sequence[Any]],
    filename: str,
) -> HttpResponse:
    """Return ``HttpResponse`` with ``rows`` exported as CSV."""

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f"attachment; filename={filename}"
    writer = csv.writer(response)
    writer.writerow(list(headers))
    for obj in rows:
        writer.writerow(list(row_builder(obj)))
    return response


def build_querystring(
    request: HttpRequest, exclude: Sequence[str] | None = None
) -> str:
    """Return querystring for ``request.GET`` excluding certain keys."""

    params = request.GET.copy()
    for key in exclude or ("page",):
        params.pop(key, None)
    return params.urlencode()

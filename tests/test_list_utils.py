from django.test import RequestFactory

from procurement.services import list_utils

PRODUCTS = [
    {"id": "1", "name": "apple crate", "category": "Breakroom"},
    {"id": "2", "name": "Banana hook", "category": "Breakroom"},
    {"id": "3", "name": "Carrot peeler", "category": "Kitchen"},
    {"id": "4", "name": None, "category": "Breakroom"},
]


def test_apply_filters_sort():
    request = RequestFactory().get(
        "/catalog/",
        {"q": "a", "category": "Breakroom", "sort": "name", "direction": "desc"},
    )
    rows, params = list_utils.apply_filters_sort(
        request,
        PRODUCTS,
        search_fields=["name"],
        filter_fields={"category": "category"},
        allowed_sorts={"name"},
        default_sort="name",
    )
    assert [r["name"] for r in rows] == ["Banana hook", "apple crate"]
    assert params["category"] == "Breakroom"
    assert params["sort"] == "name"
    assert params["direction"] == "desc"


def test_apply_filters_sort_all_disables_filter_and_empty_values_sort_last():
    request = RequestFactory().get("/catalog/", {"category": "ALL"})
    rows, params = list_utils.apply_filters_sort(
        request,
        PRODUCTS,
        filter_fields={"category": "category"},
        default_sort="name",
    )
    assert [r["id"] for r in rows] == ["1", "2", "3", "4"]
    assert params["direction"] == "asc"


def test_apply_filters_sort_rejects_unknown_sort():
    request = RequestFactory().get("/catalog/", {"sort": "secret", "direction": "sideways"})
    rows, params = list_utils.apply_filters_sort(
        request, PRODUCTS, allowed_sorts={"name"}, default_sort="id"
    )
    assert params["sort"] == "id"
    assert params["direction"] == "asc"
    assert [r["id"] for r in rows] == ["1", "2", "3", "4"]


def test_paginate():
    request = RequestFactory().get("/catalog/", {"page_size": "2", "page": "2"})
    page_obj, per_page = list_utils.paginate(request, PRODUCTS[:3])
    assert per_page == 2
    assert [r["id"] for r in page_obj.object_list] == ["3"]


def test_paginate_invalid_page_size_uses_default():
    request = RequestFactory().get("/catalog/", {"page_size": "zero"})
    _, per_page = list_utils.paginate(request, PRODUCTS)
    assert per_page == 25


def test_export_as_csv():
    response = list_utils.export_as_csv(
        PRODUCTS[:1], ["Name"], lambda p: [p["name"]], "products.csv"
    )
    content = response.content.decode().strip().splitlines()
    assert response["Content-Disposition"] == "attachment; filename=products.csv"
    assert content[0] == "Name"
    assert content[1] == "apple crate"


def test_build_querystring():
    request = RequestFactory().get("/catalog/", {"q": "x", "page": "2"})
    qs = list_utils.build_querystring(request)
    assert qs == "q=x"

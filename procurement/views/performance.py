from django.shortcuts import render

from ..forms import PerformanceFilterForm
from ..services import list_utils, supplier_performance_service
from ..services.supplier_performance_service import ALL, ReportFilters


def _filters(form) -> ReportFilters:
    if not form.is_valid():
        return ReportFilters()
    data = form.cleaned_data
    return ReportFilters(
        date_range=data.get("date_range") or ALL,
        min_rating=float(data.get("min_rating") or 0),
        category=data.get("category") or ALL,
    )


def supplier_performance(request):
    """Supplier win rates, ratings and order counts with filters.

    ``?export=1`` returns the filtered report as CSV.
    """
    inputs = supplier_performance_service.load_inputs()
    categories = supplier_performance_service.categories(inputs["products"])
    form = PerformanceFilterForm(request.GET or None, categories=categories)
    report = supplier_performance_service.build_report(
        inputs["suppliers"],
        inputs["quotes"],
        inputs["orders"],
        inputs["products"],
        _filters(form) if form.is_bound else ReportFilters(),
    )
    rows = report.to_dict("records")

    if request.GET.get("export") == "1":
        headers = ["Supplier", "Quotes Submitted", "Quotes Accepted", "Win Rate %", "Rating", "Orders"]

        def row(r):
            return [
                r["company_name"],
                r["quotes_submitted"],
                r["quotes_accepted"],
                f"{r['win_rate']:.1f}",
                f"{r['avg_rating']:.1f}",
                r["total_orders"],
            ]

        return list_utils.export_as_csv(rows, headers, row, "supplier_performance.csv")

    ctx = {
        "form": form,
        "rows": rows,
        "summary": supplier_performance_service.summarize(report),
        "querystring": list_utils.build_querystring(request, exclude=("export",)),
    }
    return render(request, "procurement/supplier_performance.html", ctx)

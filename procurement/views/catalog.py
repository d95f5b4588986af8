import csv
import io
import logging

from django.contrib import messages
from django.http import Http404, HttpResponse
from django.shortcuts import redirect, render
from django.template.loader import render_to_string
from django.urls import reverse
from django.views import View
from django.views.generic import TemplateView

from ..forms import BulkUploadForm, MasterProductForm
from ..services import list_utils, master_product_service

logger = logging.getLogger(__name__)

ALLOWED_SORTS = {"name", "category", "subcategory", "brand", "model_number", "created_at"}
SORT_OPTIONS = [
    ("name", "Name"),
    ("category", "Category"),
    ("brand", "Brand"),
    ("model_number", "Model number"),
    ("created_at", "Date added"),
]


def _filter_and_sort_products(request):
    """Return master products filtered and sorted according to request params."""
    rows = master_product_service.get_master_products()
    return list_utils.apply_filters_sort(
        request,
        rows,
        search_fields=["name", "brand", "model_number"],
        filter_fields={"category": "category", "subcategory": "subcategory"},
        allowed_sorts=ALLOWED_SORTS,
        default_sort="name",
    )


class CatalogListView(TemplateView):
    """Show catalog filters and the first page of the table.

    GET params:
        q, category, subcategory, page_size, sort, direction
        control filtering, pagination and ordering.
    """

    template_name = "procurement/catalog_list.html"

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        request = self.request
        rows, params = _filter_and_sort_products(request)
        page_obj, per_page = list_utils.paginate(request, rows)
        table_ctx = {**params, "page_obj": page_obj, "page_size": per_page}
        catalog_table = render_to_string(
            "procurement/partials/_catalog_table.html", table_ctx, request=request
        )
        category = params.get("category") or ""
        subcategories = []
        if category:
            subcategories = master_product_service.get_subcategories(
                master_product_service.get_master_products(category=category), category
            )
        ctx.update(params)
        ctx.update(
            {
                "categories": master_product_service.get_categories(),
                "subcategories": subcategories,
                "page_size": per_page,
                "catalog_table": catalog_table,
                "export_url": reverse("catalog_export"),
                "sort_options": SORT_OPTIONS,
            }
        )
        return ctx


class CatalogTableView(TemplateView):
    """Render the paginated catalog table for htmx refreshes."""

    template_name = "procurement/partials/_catalog_table.html"

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        rows, params = _filter_and_sort_products(self.request)
        page_obj, per_page = list_utils.paginate(self.request, rows)
        ctx.update(params)
        ctx.update({"page_obj": page_obj, "page_size": per_page})
        return ctx


class CatalogExportView(View):
    """Export the filtered catalog as CSV."""

    def get(self, request):
        rows, _ = _filter_and_sort_products(request)
        headers = ["ID", "Name", "Category", "Subcategory", "Brand", "Model Number"]

        def row(product):
            return [
                product.get("id"),
                product.get("name"),
                product.get("category"),
                product.get("subcategory") or "",
                product.get("brand") or "",
                product.get("model_number") or "",
            ]

        return list_utils.export_as_csv(rows, headers, row, "master_products.csv")


class CatalogCreateView(View):
    template_name = "procurement/catalog_form.html"

    def _ctx(self, form):
        return {
            "form": form,
            "is_edit": False,
            "categories": master_product_service.get_categories(),
        }

    def get(self, request):
        return render(request, self.template_name, self._ctx(MasterProductForm()))

    def post(self, request):
        form = MasterProductForm(request.POST)
        if form.is_valid():
            ok, msg, _ = master_product_service.create_master_product(form.cleaned_data)
            if ok:
                messages.success(request, msg)
                return redirect("catalog_list")
            messages.error(request, msg)
        return render(request, self.template_name, self._ctx(form))


class CatalogEditView(View):
    template_name = "procurement/catalog_form.html"

    def _get_product(self, pk: str):
        product = master_product_service.get_master_product(pk)
        if product is None:
            raise Http404("Master product not found")
        return product

    def _ctx(self, form, product):
        return {
            "form": form,
            "is_edit": True,
            "product": product,
            "categories": master_product_service.get_categories(),
        }

    def get(self, request, pk: str):
        product = self._get_product(pk)
        form = MasterProductForm(product=product)
        return render(request, self.template_name, self._ctx(form, product))

    def post(self, request, pk: str):
        product = self._get_product(pk)
        form = MasterProductForm(request.POST)
        if form.is_valid():
            ok, msg = master_product_service.update_master_product(pk, form.cleaned_data)
            if ok:
                messages.success(request, msg)
                return redirect("catalog_list")
            messages.error(request, msg)
        return render(request, self.template_name, self._ctx(form, product))


class CatalogDeleteView(View):
    """Delete a master product after the confirm dialog posts back."""

    def post(self, request, pk: str):
        ok, msg = master_product_service.delete_master_product(pk)
        if ok:
            messages.success(request, msg)
        else:
            messages.error(request, msg)
        return redirect("catalog_list")


class CatalogSkuSuggestionView(View):
    """Return a model number suggestion for the category typed in the form."""

    def get(self, request):
        category = (request.GET.get("category") or "").strip()
        return HttpResponse(master_product_service.generate_sku(category), content_type="text/plain")


def _form_error_text(form) -> str:
    return "; ".join(
        f"{field}: {error['message']}"
        for field, field_errors in form.errors.get_json_data().items()
        for error in field_errors
    )


class CatalogBulkUploadView(View):
    template_name = "procurement/bulk_upload.html"

    def _ctx(self, form, inserted=0, errors=None):
        return {
            "form": form,
            "inserted": inserted,
            "row_errors": errors or [],
            "title": "Bulk Upload Master Products",
            "back_url": "catalog_list",
            "columns": "name, category, subcategory, brand, model_number, description, specifications, image_url",
        }

    def get(self, request):
        return render(request, self.template_name, self._ctx(BulkUploadForm()))

    def post(self, request):
        inserted = 0
        errors: list[str] = []
        form = BulkUploadForm(request.POST, request.FILES)
        if form.is_valid():
            file = form.cleaned_data["file"]
            try:
                data = io.StringIO(file.read().decode("utf-8-sig"))
            except UnicodeDecodeError:
                errors.append("File must be UTF-8 encoded CSV.")
                return render(request, self.template_name, self._ctx(form, inserted, errors))
            reader = csv.DictReader(data)
            for line, row in enumerate(reader, start=2):
                # specifications in CSV use ";" between pairs
                row = dict(row)
                row["specifications"] = (row.get("specifications") or "").replace(";", "\n")
                form_row = MasterProductForm(row)
                if not form_row.is_valid():
                    errors.append(f"Row {line}: {_form_error_text(form_row)}")
                    continue
                ok, msg, _ = master_product_service.create_master_product(form_row.cleaned_data)
                if ok:
                    inserted += 1
                else:
                    errors.append(f"Row {line}: {msg}")
            if inserted:
                logger.info("Bulk uploaded %d master products", inserted)
        return render(request, self.template_name, self._ctx(form, inserted, errors))

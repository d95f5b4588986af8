"""Template tags for the shared UI pieces: badges, pagination, toasts and dialogs."""

from django import template

from ..services import list_utils, ui_service

register = template.Library()


@register.inclusion_tag("procurement/partials/_status_badge.html")
def status_badge(status):
    return ui_service.status_badge(status)


@register.inclusion_tag("procurement/partials/_pagination.html", takes_context=True)
def pagination(context, page_obj, target=None, url=None):
    """Render page links for ``page_obj``.

    When ``target`` is given the links swap that element through htmx
    instead of navigating, requesting ``url`` (default: the current path).
    """
    request = context.get("request")
    querystring = list_utils.build_querystring(request) if request is not None else ""
    return {
        "page_obj": page_obj,
        "pages": ui_service.page_numbers(page_obj.number, page_obj.paginator.num_pages),
        "ellipsis": ui_service.ELLIPSIS,
        "querystring": querystring,
        "target": target,
        "path": url or (request.path if request is not None else ""),
    }


@register.inclusion_tag("procurement/partials/_toasts.html", takes_context=True)
def toasts(context):
    toast_list = [
        {"text": str(message), "tone": ui_service.toast_tone(message.tags)}
        for message in context.get("messages") or []
    ]
    return {"toasts": toast_list}


@register.inclusion_tag("procurement/partials/_confirm_dialog.html", takes_context=True)
def confirm_dialog(
    context,
    dialog_id,
    action,
    title,
    message,
    confirm_label="Confirm",
    tone="danger",
):
    return {
        "dialog_id": dialog_id,
        "action": action,
        "title": title,
        "message": message,
        "confirm_label": confirm_label,
        "tone": tone if tone in {"danger", "primary"} else "primary",
        "csrf_token": context.get("csrf_token"),
    }


@register.inclusion_tag("procurement/partials/_empty_state.html")
def empty_state(title, message=""):
    return {"title": title, "message": message}


@register.filter
def currency(amount, code="SAR"):
    return ui_service.format_currency(amount, code or "SAR")


@register.filter
def compact_currency(amount, code="SAR"):
    return ui_service.format_currency(amount, code or "SAR", compact=True)


@register.filter
def get_item(mapping, key):
    return (mapping or {}).get(key)

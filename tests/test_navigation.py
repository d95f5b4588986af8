from django.urls import reverse

NAV_LINKS = [
    ("po_queue", "PO Verification"),
    ("catalog_list", "Master Catalog"),
    ("supplier_performance", "Supplier Performance"),
    ("custom_requests", "Custom Requests"),
    ("payouts", "Payouts"),
    ("bank_details", "Bank Details"),
]


def test_signed_in_pages_show_console_nav(client, no_supabase):
    html = client.get(reverse("root")).content.decode()
    for name, label in NAV_LINKS:
        assert f'href="{reverse(name)}" class="hover:underline">{label}</a>' in html
    assert "Sign out (admin)" in html


def test_login_page_hides_console_nav(client):
    client.logout()
    html = client.get(reverse("login")).content.decode()
    assert "Procurement Console" in html
    assert "Master Catalog" not in html
    assert "Sign out" not in html

"""Tests for the order confirmation email template."""

from storefront.notifications.templates.order_confirmation import OrderConfirmationTemplate


def _render(**overrides):
    context = {
        "order_id": "ord-001",
        "total": 10000,
        "currency_code": "dust",
        "items": [{"title": "Dust Hoodie", "quantity": 2, "amount": 5000, "currency_code": "dust"}],
    }
    context.update(overrides)
    return OrderConfirmationTemplate.render(context)


class TestOrderConfirmationTemplate:
    def test_subject(self):
        assert _render()["subject"] == "Order Confirmation - Order #ord-001"

    def test_text_body_lists_items_and_total(self):
        body = _render()["body"]
        assert "10,000 ⚡ Dust" in body
        assert "- Dust Hoodie (x2)" in body

    def test_html_body_formats_fiat(self):
        html = _render(
            total=2500,
            currency_code="usd",
            items=[{"title": "T-Shirt", "quantity": 1, "amount": 2500, "currency_code": "usd"}],
        )["html_body"]
        assert "$25.00" in html
        assert "<strong>T-Shirt</strong>" in html

    def test_html_escapes_titles(self):
        html = _render(items=[{"title": "<script>", "quantity": 1, "amount": 1, "currency_code": "dust"}])["html_body"]
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

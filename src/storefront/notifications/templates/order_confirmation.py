"""Order confirmation template — sent when an order is placed."""

from html import escape

from storefront.shared.money import format_price


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        currency = context.get("currency_code", "usd")
        total = format_price(context.get("total", 0), currency)
        items = context.get("items", [])

        text_lines = "\n".join(f"- {item['title']} (x{item['quantity']})" for item in items)
        html_items = "".join(
            "<li style=\"padding: 10px 0; border-bottom: 1px solid #e5e7eb;\">"
            f"<strong>{escape(item['title'])}</strong><br>"
            f"Quantity: {item['quantity']} × {format_price(item['amount'], item.get('currency_code', currency))}"
            "</li>"
            for item in items
        )

        return {
            "subject": f"Order Confirmation - Order #{order_id}",
            "body": f"Order Confirmation - Order #{order_id}\n\nTotal: {total}\n\nItems:\n{text_lines}",
            "html_body": (
                "<html><body style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
                "<h1>Thank you for your order!</h1>"
                "<p>Your order has been confirmed and will be processed shortly.</p>"
                "<h2>Order Details</h2>"
                f"<p><strong>Order ID:</strong> {escape(str(order_id))}</p>"
                f"<p><strong>Total:</strong> {total}</p>"
                f"<h3>Items:</h3><ul style=\"list-style: none; padding: 0;\">{html_items}</ul>"
                "<p>You will receive another email when your order ships.</p>"
                "</body></html>"
            ),
        }

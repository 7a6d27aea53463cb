"""Shopping cart page."""

from __future__ import annotations

import logging

from shopcheck.pages.base import BasePage
from shopcheck.pages.checkout import CheckoutPage

logger = logging.getLogger(__name__)


class ShoppingCartPage(BasePage):
    """Cart contents, coupon, terms of service and checkout."""

    catalog_name = "cart"
    url_path = "/cart"
    landmark = "shopping_cart.page.title"

    async def item_names(self) -> list[str]:
        return await self.texts_of("shopping_cart.cart_with_items.item_name")

    async def item_count(self) -> int:
        return await self.count_of("shopping_cart.cart_with_items.item_row")

    async def is_empty(self) -> bool:
        return await self.item_count() == 0

    async def empty_message(self) -> str:
        return await self.text_of("shopping_cart.empty_cart.message")

    async def set_quantity(self, quantity: int) -> None:
        """Set the quantity of the first cart line and update the cart."""
        if quantity < 0:
            raise ValueError("quantity cannot be negative")
        await self.type("shopping_cart.cart_with_items.quantity_input", str(quantity))
        await self.update_cart()

    async def remove_first_item(self) -> None:
        await self.click("shopping_cart.cart_with_items.remove_item")
        await self.update_cart()

    async def update_cart(self) -> None:
        await self.click("shopping_cart.cart_with_items.update_cart")

    async def apply_coupon(self, code: str) -> None:
        await self.type("shopping_cart.discount_coupon.coupon_code", code)
        await self.click("shopping_cart.discount_coupon.apply_coupon")

    async def accept_terms(self) -> None:
        await self.click("shopping_cart.cart_actions.terms_of_service")

    async def checkout(self) -> CheckoutPage:
        """Accept the terms of service and start checkout."""
        logger.info("Starting checkout")
        await self.accept_terms()
        await self.click("shopping_cart.cart_actions.checkout_button")
        return self._sibling(CheckoutPage)

    async def order_total(self) -> str:
        return await self.text_of("shopping_cart.cart_totals.order_total")

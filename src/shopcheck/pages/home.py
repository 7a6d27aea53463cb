"""Home page of the demo shop."""

from __future__ import annotations

import logging
import re

from shopcheck.pages.base import BasePage
from shopcheck.pages.cart import ShoppingCartPage
from shopcheck.pages.login import LoginPage
from shopcheck.pages.register import RegisterPage
from shopcheck.pages.search import SearchPage

logger = logging.getLogger(__name__)

CATEGORY_MENUS = {
    "books": "navigation.books_menu",
    "computers": "navigation.computers_menu",
    "electronics": "navigation.electronics_menu",
    "apparel-shoes": "navigation.apparel_shoes_menu",
    "digital-downloads": "navigation.digital_downloads_menu",
    "jewelry": "navigation.jewelry_menu",
    "gift-cards": "navigation.gift_cards_menu",
}


class HomePage(BasePage):
    """Header links, search box, category menu and newsletter."""

    catalog_name = "homepage"
    url_path = "/"
    landmark = "header.logo"

    async def go_to_login(self) -> LoginPage:
        await self.click("header.login_link")
        return self._sibling(LoginPage)

    async def go_to_register(self) -> RegisterPage:
        await self.click("header.register_link")
        return self._sibling(RegisterPage)

    async def go_to_cart(self) -> ShoppingCartPage:
        await self.click("header.cart_link")
        return self._sibling(ShoppingCartPage)

    async def logout(self) -> None:
        await self.click("header.logout_link")

    async def is_logged_in(self) -> bool:
        return await self.is_displayed("header.logout_link")

    async def account_email(self) -> str:
        """Email shown in the header once a customer is logged in."""
        return await self.text_of("header.account_link")

    async def search(self, term: str) -> SearchPage:
        """Search from the header box and land on the results page."""
        await self.type("search.search_input", term)
        await self.click("search.search_button")
        return self._sibling(SearchPage)

    async def cart_quantity(self) -> int:
        """Number of items in the header cart badge, e.g. ``(2)`` -> 2."""
        text = await self.text_of("header.cart_quantity")
        match = re.search(r"\d+", text)
        return int(match.group()) if match else 0

    async def open_category(self, category: str) -> None:
        """Open a top-menu category.

        Raises:
            ValueError: If the category is not in the top menu.
        """
        path = CATEGORY_MENUS.get(category.lower())
        if path is None:
            raise ValueError(
                f"Unknown category: {category}. "
                f"Expected one of: {', '.join(CATEGORY_MENUS)}"
            )
        await self.click(path)

    async def featured_product_titles(self) -> list[str]:
        return await self.texts_of("main_content.featured_products.product_title")

    async def subscribe_newsletter(self, email: str) -> str:
        """Subscribe email and return the result message."""
        await self.type("main_content.newsletter.email_input", email)
        await self.click("main_content.newsletter.subscribe_button")
        message = await self.text_of("main_content.newsletter.result_block")
        logger.info(f"Newsletter result: {message}")
        return message

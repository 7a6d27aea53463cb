"""Shop-level assertions over page objects.

In hard mode (the default) the first failing check raises AssertionError.
In soft mode failures are collected and ``assert_all()`` raises once with
every message, so one test can report several problems.
"""

from __future__ import annotations

import logging
from collections.abc import Sized
from decimal import Decimal, InvalidOperation

from shopcheck.factories import Address, User
from shopcheck.pages.base import BasePage
from shopcheck.pages.cart import ShoppingCartPage
from shopcheck.pages.checkout import CheckoutPage
from shopcheck.pages.home import HomePage
from shopcheck.pages.login import LoginPage
from shopcheck.pages.register import RegisterPage
from shopcheck.pages.search import SearchPage

logger = logging.getLogger(__name__)

REGISTRATION_COMPLETED = "Your registration completed"


def parse_price(text: str) -> Decimal:
    """``"1,234.50"`` or ``"$10.00"`` -> Decimal.

    Raises:
        ValueError: If text holds no number.
    """
    cleaned = "".join(c for c in text if c.isdigit() or c == ".")
    try:
        return Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Not a price: {text!r}") from e


class ShopAssertions:
    """Checks that read the shop through page objects.

    Example:
        >>> check = ShopAssertions(soft=True)
        >>> await check.logged_in(home, user.email)
        >>> await check.cart_count(home, 2)
        >>> check.assert_all()
    """

    def __init__(self, soft: bool = False) -> None:
        self.soft = soft
        self.failures: list[str] = []

    def check(self, condition: bool, message: str) -> bool:
        """Record or raise a failure when condition is false."""
        if condition:
            return True
        logger.error(f"Assertion failed: {message}")
        if not self.soft:
            raise AssertionError(message)
        self.failures.append(message)
        return False

    def assert_all(self) -> None:
        """Raise every collected soft failure at once, then reset."""
        if not self.failures:
            return
        failures, self.failures = self.failures, []
        raise AssertionError(
            f"{len(failures)} assertion(s) failed:\n"
            + "\n".join(f"- {failure}" for failure in failures)
        )

    async def logged_in(self, home: HomePage, identifier: str | None = None) -> None:
        self.check(await home.is_logged_in(), "User should be logged in")
        if identifier:
            shown = await home.account_email()
            self.check(
                identifier.lower() in shown.lower(),
                f"Header should show '{identifier}', got '{shown}'",
            )

    async def logged_out(self, home: HomePage) -> None:
        self.check(not await home.is_logged_in(), "User should be logged out")

    async def registration_succeeded(self, page: RegisterPage, user: User) -> None:
        message = await page.result_message()
        self.check(
            REGISTRATION_COMPLETED.lower() in message.lower(),
            f"Registration of {user.email} should complete, got '{message}'",
        )

    async def login_rejected(self, page: LoginPage) -> None:
        self.check(await page.has_errors(), "Login should show an error message")

    def error_mentions(self, messages: list[str], expected: str, field: str) -> None:
        self.check(
            any(expected.lower() in message.lower() for message in messages),
            f"{field} errors should mention '{expected}', got {messages}",
        )

    async def search_results(
        self, page: SearchPage, term: str, should_have_results: bool
    ) -> None:
        count = await page.result_count()
        if should_have_results:
            self.check(count > 0, f"Search for '{term}' should return results")
        else:
            self.check(count == 0, f"Search for '{term}' returned {count} results")

    async def cart_count(self, home: HomePage, expected: int) -> None:
        actual = await home.cart_quantity()
        self.check(
            actual == expected, f"Cart badge should show {expected}, got {actual}"
        )

    async def cart_items(self, cart: ShoppingCartPage, expected: int) -> None:
        actual = await cart.item_count()
        self.check(
            actual == expected, f"Cart should hold {expected} lines, got {actual}"
        )

    async def cart_total(self, cart: ShoppingCartPage, expected: Decimal) -> None:
        actual = parse_price(await cart.order_total())
        self.check(
            actual == expected, f"Cart total should be {expected}, got {actual}"
        )

    async def checkout_loaded(self, checkout: CheckoutPage) -> None:
        self.check(await checkout.is_loaded(), "Checkout page should be loaded")

    async def order_completed(self, checkout: CheckoutPage) -> str:
        """Check the confirmation and return the order number."""
        self.check(
            await checkout.is_order_completed(), "Order confirmation should show"
        )
        number = await checkout.order_number()
        self.check(bool(number), "Confirmation should carry an order number")
        return number

    def address_complete(self, address: Address) -> None:
        self.check(
            address.is_valid(), f"Address for {address.full_name} is missing fields"
        )

    async def url_contains(self, page: BasePage, fragment: str) -> None:
        url = await page.current_url()
        self.check(fragment in url, f"URL should contain '{fragment}', got '{url}'")

    async def title_contains(self, page: BasePage, text: str) -> None:
        title = await page.title()
        self.check(text in title, f"Title should contain '{text}', got '{title}'")

    def size(self, items: Sized, expected: int, what: str) -> None:
        self.check(
            len(items) == expected, f"{what} should have {expected}, got {len(items)}"
        )

"""One-page checkout."""

from __future__ import annotations

import logging
import re

from shopcheck.factories import Address, PaymentInfo
from shopcheck.pages.base import BasePage

logger = logging.getLogger(__name__)

# Countries whose billing form offers a state dropdown.
STATE_COUNTRIES = ("United States", "Canada")

SHIPPING_OPTIONS = {
    "ground": "checkout.shipping_method.ground",
    "next day air": "checkout.shipping_method.next_day",
    "2nd day air": "checkout.shipping_method.second_day",
}

PAYMENT_OPTIONS = {
    "cash on delivery (cod)": "checkout.payment_method.cash_on_delivery",
    "check / money order": "checkout.payment_method.check_money_order",
    "credit card": "checkout.payment_method.credit_card",
    "purchase order": "checkout.payment_method.purchase_order",
}


class CheckoutPage(BasePage):
    """Billing, shipping, payment and confirmation steps.

    The shop shows the steps as an accordion on one page; each ``continue_*``
    method submits the open step and moves to the next one.
    """

    catalog_name = "cart"
    url_path = "/onepagecheckout"
    landmark = "checkout.steps.billing"

    async def continue_as_guest(self) -> None:
        """Leave the sign-in prompt shown to anonymous shoppers."""
        await self.click("checkout.guest.checkout_as_guest")

    async def active_step(self) -> str:
        return await self.text_of("checkout.steps.active_step")

    async def fill_billing_address(self, address: Address) -> None:
        logger.info(f"Filling billing address for {address.full_name}")
        fields = {
            "first_name": address.first_name,
            "last_name": address.last_name,
            "email": address.email,
            "company": address.company,
            "city": address.city,
            "address1": address.address1,
            "address2": address.address2,
            "zip_code": address.zip_postal_code,
            "phone": address.phone_number,
        }
        for field, value in fields.items():
            if value:
                await self.type(f"checkout.billing_address.{field}", value)
        await self.select("checkout.billing_address.country", address.country)
        if address.state and address.country in STATE_COUNTRIES:
            await self.select("checkout.billing_address.state", address.state)

    async def continue_billing(self) -> None:
        await self.click("checkout.billing_address.continue")

    async def continue_shipping_address(self) -> None:
        await self.click("checkout.shipping_address.continue")

    async def select_shipping_method(self, method: str) -> None:
        """Pick a shipping method by its label, e.g. ``Next Day Air``.

        Raises:
            ValueError: If the shop does not offer the method.
        """
        path = SHIPPING_OPTIONS.get(method.strip().lower())
        if path is None:
            raise ValueError(f"Unknown shipping method: {method}")
        await self.click(path)

    async def continue_shipping_method(self) -> None:
        await self.click("checkout.shipping_method.continue")

    async def select_payment_method(self, method: str) -> None:
        """Pick a payment method by its label, e.g. ``Credit Card``.

        Raises:
            ValueError: If the shop does not offer the method.
        """
        path = PAYMENT_OPTIONS.get(method.strip().lower())
        if path is None:
            raise ValueError(f"Unknown payment method: {method}")
        await self.click(path)

    async def continue_payment_method(self) -> None:
        await self.click("checkout.payment_method.continue")

    async def fill_credit_card(self, payment: PaymentInfo) -> None:
        logger.info(f"Paying with card {payment.masked_number}")
        await self.select("checkout.payment_information.card_type", payment.card_type)
        await self.type(
            "checkout.payment_information.card_holder_name", payment.card_holder_name
        )
        await self.type("checkout.payment_information.card_number", payment.card_number)
        await self.select(
            "checkout.payment_information.expiry_month", payment.expiration_month
        )
        await self.select(
            "checkout.payment_information.expiry_year", payment.expiration_year
        )
        await self.type("checkout.payment_information.card_code", payment.cvv)

    async def enter_purchase_order_number(self, number: str) -> None:
        await self.type("checkout.payment_information.purchase_order_number", number)

    async def continue_payment_info(self) -> None:
        await self.click("checkout.payment_information.continue")

    async def order_total(self) -> str:
        return await self.text_of("checkout.confirm_order.order_total")

    async def confirm_order(self) -> None:
        await self.click("checkout.confirm_order.confirm_button")

    async def is_order_completed(self) -> bool:
        return await self.is_displayed("checkout.order_completed.title")

    async def order_number(self) -> str:
        """Number from the confirmation, e.g. ``Order number: 1234`` -> ``1234``."""
        text = await self.text_of("checkout.order_completed.order_number")
        match = re.search(r"\d+", text)
        return match.group() if match else ""

    async def has_validation_errors(self) -> bool:
        return await self.is_displayed(
            "checkout.validation.field_errors"
        ) or await self.is_displayed("checkout.validation.message_error")

    async def validation_errors(self) -> list[str]:
        return await self.texts_of("checkout.validation.field_errors")

    async def place_order(
        self,
        billing: Address,
        shipping_method: str = "Ground",
        payment_method: str = "Cash On Delivery (COD)",
        payment: PaymentInfo | None = None,
    ) -> str:
        """Walk every step with the ship-to-billing-address default.

        Args:
            billing: Address for the billing step, also used for shipping.
            shipping_method: Label of the shipping method.
            payment_method: Label of the payment method.
            payment: Card details, required for ``Credit Card``.

        Returns:
            The order number shown once the order is placed.

        Raises:
            ValueError: If a credit card payment has no card details, or a
                method label is unknown.
        """
        if shipping_method.strip().lower() not in SHIPPING_OPTIONS:
            raise ValueError(f"Unknown shipping method: {shipping_method}")
        if payment_method.strip().lower() not in PAYMENT_OPTIONS:
            raise ValueError(f"Unknown payment method: {payment_method}")
        is_card = payment_method.strip().lower() == "credit card"
        if is_card and payment is None:
            raise ValueError("Credit card payment needs card details")

        await self.fill_billing_address(billing)
        await self.continue_billing()
        await self.select_shipping_method(shipping_method)
        await self.continue_shipping_method()
        await self.select_payment_method(payment_method)
        await self.continue_payment_method()
        if is_card and payment is not None:
            await self.fill_credit_card(payment)
        await self.continue_payment_info()
        await self.confirm_order()

        number = await self.order_number()
        logger.info(f"Placed order {number}")
        return number

"""Customer registration page."""

from __future__ import annotations

import logging

from shopcheck.factories import User
from shopcheck.pages.base import BasePage

logger = logging.getLogger(__name__)

GENDER_PATHS = {
    "m": "registration_page.form_elements.gender_male",
    "male": "registration_page.form_elements.gender_male",
    "f": "registration_page.form_elements.gender_female",
    "female": "registration_page.form_elements.gender_female",
}


class RegisterPage(BasePage):
    """New-customer registration form."""

    catalog_name = "authentication"
    url_path = "/register"
    landmark = "registration_page.form_elements.register_button"

    async def select_gender(self, gender: str) -> None:
        """Pick the gender radio button.

        Raises:
            ValueError: If gender is not male/female (or m/f).
        """
        path = GENDER_PATHS.get(gender.strip().lower())
        if path is None:
            raise ValueError(f"Unknown gender: {gender}")
        await self.click(path)

    async def enter_first_name(self, first_name: str) -> None:
        await self.type("registration_page.form_elements.first_name", first_name)

    async def enter_last_name(self, last_name: str) -> None:
        await self.type("registration_page.form_elements.last_name", last_name)

    async def enter_email(self, email: str) -> None:
        await self.type("registration_page.form_elements.email_input", email)

    async def enter_password(self, password: str) -> None:
        await self.type("registration_page.form_elements.password_input", password)

    async def confirm_password(self, password: str) -> None:
        await self.type("registration_page.form_elements.confirm_password", password)

    async def submit(self) -> None:
        await self.click("registration_page.form_elements.register_button")

    async def register(self, user: User, confirmation: str | None = None) -> bool:
        """Fill in the whole form for user and submit it.

        Args:
            user: Customer to register.
            confirmation: Value for the confirm-password field; defaults to
                the user's password.

        Returns:
            True if the shop showed the registration result page.
        """
        logger.info(f"Registering {user.email}")
        await self.select_gender(user.gender)
        await self.enter_first_name(user.first_name)
        await self.enter_last_name(user.last_name)
        await self.enter_email(user.email)
        await self.enter_password(user.password)
        await self.confirm_password(
            user.password if confirmation is None else confirmation
        )
        await self.submit()
        return "/registerresult" in await self.current_url()

    async def result_message(self) -> str:
        return await self.text_of("registration_page.result.message")

    async def continue_after_registration(self) -> None:
        await self.click("registration_page.result.continue_button")

    async def has_validation_errors(self) -> bool:
        return await self.is_displayed(
            "registration_page.validation.summary_errors"
        ) or await self.is_displayed("registration_page.validation.validation_errors")

    async def validation_errors(self) -> list[str]:
        """Summary and per-field messages, in that order."""
        summary = await self.texts_of("registration_page.validation.summary_errors")
        fields = await self.texts_of("registration_page.validation.validation_errors")
        return summary + fields

"""Login and password recovery pages."""

from __future__ import annotations

import logging

from shopcheck.pages.base import BasePage

logger = logging.getLogger(__name__)


class LoginPage(BasePage):
    """Returning-customer login form."""

    catalog_name = "authentication"
    url_path = "/login"
    landmark = "login_page.form_elements.email_input"

    async def enter_email(self, email: str) -> None:
        await self.type("login_page.form_elements.email_input", email)

    async def enter_password(self, password: str) -> None:
        await self.type("login_page.form_elements.password_input", password)

    async def check_remember_me(self) -> None:
        await self.click("login_page.form_elements.remember_me")

    async def submit(self) -> None:
        await self.click("login_page.form_elements.login_button")

    async def login(self, email: str, password: str, remember_me: bool = False) -> bool:
        """Fill in and submit the form.

        Returns:
            True if the site left the login page, i.e. the login succeeded.
        """
        logger.info(f"Logging in as {email}")
        await self.enter_email(email)
        await self.enter_password(password)
        if remember_me:
            await self.check_remember_me()
        await self.submit()
        return "/login" not in await self.current_url()

    async def has_errors(self) -> bool:
        return await self.is_displayed("login_page.validation.error_messages")

    async def error_message(self) -> str:
        return await self.text_of("login_page.validation.error_messages")

    async def field_errors(self) -> list[str]:
        return await self.texts_of("login_page.validation.field_errors")

    async def go_to_password_recovery(self) -> PasswordRecoveryPage:
        await self.click("login_page.links.forgot_password")
        return self._sibling(PasswordRecoveryPage)


class PasswordRecoveryPage(BasePage):
    """Forgot-password form."""

    catalog_name = "authentication"
    url_path = "/passwordrecovery"
    landmark = "password_recovery.form_elements.recover_button"

    async def recover(self, email: str) -> None:
        await self.type("password_recovery.form_elements.email_input", email)
        await self.click("password_recovery.form_elements.recover_button")

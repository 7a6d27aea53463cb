"""Page objects for the demo shop."""

from .base import BasePage
from .cart import ShoppingCartPage
from .checkout import CheckoutPage
from .home import HomePage
from .login import LoginPage, PasswordRecoveryPage
from .register import RegisterPage
from .search import SearchPage

__all__ = [
    "BasePage",
    "CheckoutPage",
    "HomePage",
    "LoginPage",
    "PasswordRecoveryPage",
    "RegisterPage",
    "SearchPage",
    "ShoppingCartPage",
]

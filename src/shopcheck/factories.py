"""Test data factories backed by Faker."""

from __future__ import annotations

import calendar
import logging
import re
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from faker import Faker

logger = logging.getLogger(__name__)

GENDERS = ("male", "female")
EMAIL_DOMAINS = ("example.com", "test.com", "demo.org")

INVALID_EMAILS = (
    "invalid-email",
    "@domain.com",
    "user@",
    "user.domain.com",
    "user@domain",
    "user space@domain.com",
    "user@domain..com",
)

WEAK_PASSWORDS = (
    "123456",
    "password",
    "123456789",
    "qwerty",
    "abc123",
    "password123",
)

MIN_PASSWORD_LENGTH = 8


@dataclass
class User:
    """A shop customer used by registration and login scenarios."""

    first_name: str
    last_name: str
    email: str
    password: str
    gender: str = "male"
    date_of_birth: date | None = None
    company: str | None = None
    newsletter: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserDataFactory:
    """Creates random users and invalid inputs.

    Pass a seed to get the same sequence of users on every run.

    Example:
        >>> factory = UserDataFactory(seed=42)
        >>> user = factory.random_user()
        >>> user.email.endswith(EMAIL_DOMAINS)
        True
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)
        self._counter = 0

    def random_user(self) -> User:
        first_name = self.faker.first_name()
        last_name = self.faker.last_name()
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=self.unique_email(first_name, last_name),
            password=self.strong_password(),
            gender=self.faker.random_element(GENDERS),
            date_of_birth=self.faker.date_of_birth(minimum_age=18, maximum_age=80),
            company=self.faker.company(),
            newsletter=self.faker.pybool(),
        )
        logger.debug(f"Created random user: {user.email}")
        return user

    def user_with_email(self, email: str) -> User:
        user = self.random_user()
        user.email = email
        return user

    def users(self, count: int) -> list[User]:
        if count < 0:
            raise ValueError("count cannot be negative")
        created = [self.random_user() for _ in range(count)]
        logger.info(f"Created {count} random users")
        return created

    def unique_email(self, first_name: str, last_name: str) -> str:
        """Email that will not collide with earlier registrations.

        Combines the name with a millisecond timestamp, a per-factory
        counter and a random number.
        """
        self._counter += 1
        domain = self.faker.random_element(EMAIL_DOMAINS)
        stamp = int(time.time() * 1000)
        suffix = self.faker.random_int(0, 99999)
        local = f"{first_name}.{last_name}.{stamp}.{self._counter}.{suffix}"
        return f"{local}@{domain}".lower().replace(" ", "")

    def strong_password(self, length: int = 12) -> str:
        """Password with upper, lower, digit and special characters.

        Lengths below 8 are raised to 8.
        """
        return self.faker.password(
            length=max(length, MIN_PASSWORD_LENGTH),
            special_chars=True,
            digits=True,
            upper_case=True,
            lower_case=True,
        )

    def weak_password(self) -> str:
        return self.faker.random_element(WEAK_PASSWORDS)

    def invalid_email(self) -> str:
        return self.faker.random_element(INVALID_EMAILS)


CATEGORIES = (
    "Books",
    "Computers",
    "Electronics",
    "Apparel & Shoes",
    "Digital downloads",
    "Jewelry",
    "Gift Cards",
)
COMPUTER_SUBCATEGORIES = ("Desktops", "Notebooks", "Accessories")
BOOK_GENRES = ("Fiction", "Science", "Computing and Internet", "Health Book")

VALID_SEARCH_TERMS = ("computer", "laptop", "book")
PARTIAL_SEARCH_TERMS = ("comp", "lap")
INVALID_SEARCH_TERMS = ("xyzabc123", "nonexistent")

SORT_OPTIONS = (
    "Name: A to Z",
    "Name: Z to A",
    "Price: Low to High",
    "Price: High to Low",
    "Created on",
)

PRODUCT_PREFIXES = ("Premium", "Professional", "Standard", "Deluxe", "Basic")
PRODUCT_KINDS = ("Laptop", "Desktop", "Monitor", "Keyboard", "Mouse", "Speaker")
PRODUCT_SUFFIXES = ("Pro", "Plus", "Elite", "Standard", "Lite")


class SearchCase(NamedTuple):
    term: str
    expect_results: bool
    reason: str


class QuantityCase(NamedTuple):
    quantity: int
    reason: str


QUANTITY_CASES = (
    QuantityCase(1, "single item"),
    QuantityCase(2, "small quantity"),
    QuantityCase(5, "medium quantity"),
    QuantityCase(10, "large quantity"),
    QuantityCase(0, "zero removes the line"),
)


class ProductDataFactory:
    """Search terms, categories, quantities and made-up products.

    Example:
        >>> factory = ProductDataFactory(seed=7)
        >>> factory.valid_search_term() in VALID_SEARCH_TERMS
        True
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)

    def valid_search_term(self) -> str:
        return self.faker.random_element(VALID_SEARCH_TERMS)

    def partial_search_term(self) -> str:
        return self.faker.random_element(PARTIAL_SEARCH_TERMS)

    def invalid_search_term(self) -> str:
        return self.faker.random_element(INVALID_SEARCH_TERMS)

    def category(self) -> str:
        return self.faker.random_element(CATEGORIES)

    def sort_option(self) -> str:
        return self.faker.random_element(SORT_OPTIONS)

    def quantity(self, minimum: int = 1, maximum: int = 5) -> int:
        if minimum > maximum:
            raise ValueError("minimum cannot exceed maximum")
        return self.faker.random_int(minimum, maximum)

    def quantities(self, count: int) -> list[int]:
        if count < 0:
            raise ValueError("count cannot be negative")
        return [self.quantity() for _ in range(count)]

    def product_name(self) -> str:
        """Name such as ``Deluxe Monitor Pro``."""
        return " ".join(
            self.faker.random_element(words)
            for words in (PRODUCT_PREFIXES, PRODUCT_KINDS, PRODUCT_SUFFIXES)
        )

    def price(self) -> Decimal:
        """Price between 10.00 and 1000.00, rounded to cents."""
        cents = self.faker.random_int(1000, 100000)
        return Decimal(cents) / 100

    @staticmethod
    def search_cases() -> list[SearchCase]:
        """Search inputs with the outcome the shop should produce.

        Deterministic, so it can feed ``pytest.mark.parametrize``.
        """
        cases = [
            SearchCase(term, True, "valid term returns results")
            for term in VALID_SEARCH_TERMS
        ]
        cases += [
            SearchCase(term, True, "partial term returns results")
            for term in PARTIAL_SEARCH_TERMS
        ]
        cases += [
            SearchCase(term, False, "unknown term returns nothing")
            for term in INVALID_SEARCH_TERMS
        ]
        cases.append(SearchCase("", False, "empty search is handled"))
        cases.append(SearchCase("@#$%", False, "special characters are handled"))
        return cases


COUNTRIES = (
    "United States",
    "Canada",
    "United Kingdom",
    "Germany",
    "France",
    "Australia",
    "Japan",
    "India",
    "Brazil",
    "Mexico",
)

SHIPPING_METHODS = ("Ground", "Next Day Air", "2nd Day Air")
PAYMENT_METHODS = (
    "Cash On Delivery (COD)",
    "Check / Money Order",
    "Credit Card",
    "Purchase Order",
)
CARD_TYPES = ("Visa", "Master card", "Amex", "Discover")

# Published test numbers; all pass the Luhn check.
TEST_CARD_NUMBERS = {
    "Visa": "4111111111111111",
    "Master card": "5555555555554444",
    "Amex": "378282246310005",
    "Discover": "6011111111111117",
}

INVALID_CARD_NUMBERS = (
    "1234567890123456",
    "4111111111111112",
    "123",
    "41111111111111111111",
    "abcd1234efgh5678",
)

CARD_NUMBER_PATTERN = re.compile(r"^[0-9]{13,19}$")
CVV_PATTERN = re.compile(r"^[0-9]{3,4}$")
MONTH_PATTERN = re.compile(r"^(0[1-9]|1[0-2])$")
YEAR_PATTERN = re.compile(r"^20[0-9]{2}$")
HOLDER_PATTERN = re.compile(r"^[a-zA-Z\s.'-]+$")


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def passes_luhn(number: str) -> bool:
    """Luhn checksum of a digit string."""
    if not number.isdigit():
        return False
    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


@dataclass
class Address:
    """Billing or shipping address as entered at checkout."""

    first_name: str
    last_name: str
    email: str = ""
    company: str | None = None
    country: str = ""
    state: str | None = None
    city: str = ""
    address1: str = ""
    address2: str | None = None
    zip_postal_code: str = ""
    phone_number: str = ""
    fax_number: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_valid(self) -> bool:
        """True if every field the shop requires is filled in."""
        return all(
            _filled(value)
            for value in (
                self.first_name,
                self.last_name,
                self.address1,
                self.city,
                self.zip_postal_code,
                self.country,
            )
        )

    def is_complete(self) -> bool:
        return (
            self.is_valid()
            and _filled(self.email)
            and _filled(self.state)
            and _filled(self.phone_number)
        )

    def display_string(self) -> str:
        """Multi-line rendering in the order the shop prints addresses."""
        lines = [self.full_name]
        if _filled(self.company):
            lines.append(str(self.company))
        lines.append(self.address1)
        if _filled(self.address2):
            lines.append(str(self.address2))
        city_line = self.city
        if _filled(self.state):
            city_line += f", {self.state}"
        lines.append(f"{city_line} {self.zip_postal_code}")
        lines.append(self.country)
        if _filled(self.phone_number):
            lines.append(f"Phone: {self.phone_number}")
        return "\n".join(lines)


@dataclass
class PaymentInfo:
    """Credit card details for the payment information step."""

    card_holder_name: str
    card_number: str
    card_type: str = "Visa"
    expiration_month: str = "01"
    expiration_year: str = ""
    cvv: str = ""
    payment_method: str = "Credit Card"

    def is_card_number_valid(self) -> bool:
        number = re.sub(r"[\s-]", "", self.card_number)
        return bool(CARD_NUMBER_PATTERN.match(number)) and passes_luhn(number)

    def is_cvv_valid(self) -> bool:
        return bool(CVV_PATTERN.match(self.cvv))

    def is_expiration_month_valid(self) -> bool:
        return bool(MONTH_PATTERN.match(self.expiration_month))

    def is_expiration_year_valid(self, today: date | None = None) -> bool:
        """Year must be this year or within the next ten."""
        if not YEAR_PATTERN.match(self.expiration_year):
            return False
        current = (today or date.today()).year
        return current <= int(self.expiration_year) <= current + 10

    def is_expired(self, today: date | None = None) -> bool:
        """Cards expire after the last day of their expiration month."""
        today = today or date.today()
        if not (
            self.is_expiration_month_valid() and self.is_expiration_year_valid(today)
        ):
            return True
        year, month = int(self.expiration_year), int(self.expiration_month)
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, last_day) < today

    def is_card_holder_name_valid(self) -> bool:
        name = self.card_holder_name.strip()
        return len(name) >= 2 and bool(HOLDER_PATTERN.match(name))

    def is_valid(self, today: date | None = None) -> bool:
        return (
            self.is_card_holder_name_valid()
            and self.is_card_number_valid()
            and self.is_cvv_valid()
            and not self.is_expired(today)
        )

    @property
    def masked_number(self) -> str:
        return f"**** {self.card_number[-4:]}"


class CheckoutDataFactory:
    """Addresses, shipping and payment choices, and card details.

    Random data comes from Faker; the ``test_*`` methods return fixed
    values for scenarios that assert on exact text.
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)

    def billing_address(self) -> Address:
        address = self._random_address()
        address.fax_number = self.faker.phone_number()
        logger.debug(f"Created random billing address for: {address.full_name}")
        return address

    def shipping_address(self) -> Address:
        address = self._random_address()
        logger.debug(f"Created random shipping address for: {address.full_name}")
        return address

    def _random_address(self) -> Address:
        return Address(
            first_name=self.faker.first_name(),
            last_name=self.faker.last_name(),
            email=self.faker.email(),
            company=self.faker.company(),
            country=self.country(),
            state=self.faker.state(),
            city=self.faker.city(),
            address1=self.faker.street_address(),
            address2=self.faker.secondary_address(),
            zip_postal_code=self.faker.zipcode(),
            phone_number=self.faker.phone_number(),
        )

    @staticmethod
    def test_billing_address() -> Address:
        return Address(
            first_name="John",
            last_name="Doe",
            email="john.doe@test.com",
            company="Test Company Inc.",
            country="United States",
            state="California",
            city="Los Angeles",
            address1="123 Test Street",
            address2="Apartment 4B",
            zip_postal_code="90210",
            phone_number="555-123-4567",
            fax_number="555-123-4568",
        )

    @staticmethod
    def test_shipping_address() -> Address:
        return Address(
            first_name="Jane",
            last_name="Smith",
            email="jane.smith@test.com",
            company="Shipping Test Co.",
            country="United States",
            state="New York",
            city="New York",
            address1="456 Shipping Ave",
            address2="Suite 100",
            zip_postal_code="10001",
            phone_number="555-987-6543",
        )

    @staticmethod
    def invalid_address() -> Address:
        """Address with the required fields blank and malformed contacts."""
        return Address(
            first_name="",
            last_name="",
            email="invalid-email",
            zip_postal_code="invalid-zip",
            phone_number="invalid-phone",
        )

    def country(self) -> str:
        return self.faker.random_element(COUNTRIES)

    def shipping_method(self) -> str:
        return self.faker.random_element(SHIPPING_METHODS)

    def payment_method(self) -> str:
        return self.faker.random_element(PAYMENT_METHODS)

    def card_type(self) -> str:
        return self.faker.random_element(CARD_TYPES)

    def payment_info(self) -> PaymentInfo:
        """Random card that expires within the next five years."""
        card_type = self.card_type()
        info = PaymentInfo(
            card_holder_name=self.faker.name(),
            card_number=TEST_CARD_NUMBERS[card_type],
            card_type=card_type,
            expiration_month=f"{self.faker.random_int(1, 12):02d}",
            expiration_year=str(date.today().year + self.faker.random_int(1, 5)),
            cvv=f"{self.faker.random_int(100, 999)}",
        )
        logger.debug(f"Created random payment info for: {info.card_holder_name}")
        return info

    @staticmethod
    def test_payment_info() -> PaymentInfo:
        return PaymentInfo(
            card_holder_name="John Doe",
            card_number=TEST_CARD_NUMBERS["Visa"],
            card_type="Visa",
            expiration_month="12",
            expiration_year=str(date.today().year + 2),
            cvv="123",
        )

    @staticmethod
    def invalid_payment_info() -> PaymentInfo:
        return PaymentInfo(
            card_holder_name="",
            card_number="1234",
            card_type="Invalid",
            expiration_month="13",
            expiration_year="2020",
            cvv="12",
        )

    def invalid_card_number(self) -> str:
        return self.faker.random_element(INVALID_CARD_NUMBERS)

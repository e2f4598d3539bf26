"""
================================================================================
Payload Factories
================================================================================

Default request payloads for the built-in entity types. Payloads are tagged
with the owning test id so that leftovers are traceable to the test that
created them.

Features:
- Deterministic defaults scoped to a test id
- Random registration data with reproducible seeds
- Shallow override merging

================================================================================
"""

from typing import Dict, Any, List, Optional
from datetime import datetime
from uuid import uuid4
import random
import string


DEFAULT_PASSWORD = "Password123!"

DEFAULT_SHIPPING_ADDRESS = {
    "street": "123 Test St",
    "city": "Test City",
    "state": "TS",
    "zipCode": "12345",
    "country": "Test Country",
}

# Fields every registration payload must carry
REGISTRATION_FIELDS = (
    "firstName", "lastName", "address", "city", "state", "zipCode",
    "phone", "ssn", "username", "password", "confirmPassword",
)


# ================================================================================
# Factory Base
# ================================================================================

class PayloadFactoryBase:
    """
    Base class for payload factories.

    Provides the random helpers shared by all payload factories.
    """

    def __init__(self, test_id: str, seed: Optional[int] = None):
        """
        Initialize factory for one test.

        Args:
            test_id: Identifier of the owning test
            seed: Random seed for reproducible data generation
        """
        self.test_id = test_id
        self._random = random.Random(seed)

    def _unique_suffix(self) -> str:
        """Timestamp plus a short random part."""
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        return f"{timestamp}_{uuid4().hex[:6]}"

    def _random_letters(self, length: int = 5) -> str:
        return ''.join(self._random.choice(string.ascii_lowercase) for _ in range(length))

    def _random_digits(self, length: int) -> str:
        first = self._random.choice("123456789")
        rest = ''.join(self._random.choice(string.digits) for _ in range(length - 1))
        return first + rest

    def _random_choice(self, options: List[Any]) -> Any:
        return self._random.choice(options)

    @staticmethod
    def merge(defaults: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Shallow merge: top-level keys of ``overrides`` replace defaults."""
        payload = dict(defaults)
        if overrides:
            payload.update(overrides)
        return payload


# ================================================================================
# User Payloads
# ================================================================================

class UserPayloadFactory(PayloadFactoryBase):
    """
    Factory for user payloads.

    Used for account creation through the API and for UI registration forms.
    """

    FIRST_NAMES = ["John", "Jane", "Michael", "Emily", "David", "Sarah", "Robert", "Jennifer"]
    LAST_NAMES = ["Smith", "Johnson", "Williams", "Jones", "Brown", "Davis", "Miller", "Wilson"]
    STREET_NAMES = ["Main St", "Oak Ave", "Maple Rd", "Cedar Ln", "Pine Dr", "Elm Blvd"]
    CITIES = ["New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "San Diego"]
    STATES = ["AL", "AZ", "CA", "CO", "FL", "GA", "IL", "TX", "WA"]
    USERNAME_PREFIXES = ["user", "test", "account", "member", "profile"]
    USERNAME_SUFFIXES = ["alpha", "beta", "delta", "gamma", "omega", "sigma"]

    def create_valid(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create the default user payload.

        Args:
            overrides: Fields replacing the defaults

        Returns:
            User payload dictionary
        """
        handle = f"user_{self.test_id}_{self._unique_suffix()}"
        defaults = {
            "username": handle,
            "email": f"{handle}@example.com",
            "password": DEFAULT_PASSWORD,
            "firstName": "Test",
            "lastName": "User",
        }
        return self.merge(defaults, overrides)

    def create_random(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Create a complete registration payload with random values."""
        password = f"Test{self._random.randint(0, 9999)}!"
        username = (
            f"{self._random_choice(self.USERNAME_PREFIXES)}_"
            f"{self._random_letters(5)}_"
            f"{self._random_choice(self.USERNAME_SUFFIXES)}"
        )
        defaults = {
            "firstName": self._random_choice(self.FIRST_NAMES),
            "lastName": self._random_choice(self.LAST_NAMES),
            "address": f"{self._random.randint(100, 999)} {self._random_choice(self.STREET_NAMES)}",
            "city": self._random_choice(self.CITIES),
            "state": self._random_choice(self.STATES),
            "zipCode": self._random_digits(5),
            "phone": self._random_digits(10),
            "ssn": self._random_ssn(),
            "username": username,
            "password": password,
            "confirmPassword": password,
        }
        return self._registration(defaults, overrides)

    def create_default(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Create the fixed registration payload used by login/registration flows."""
        defaults = {
            "firstName": "John",
            "lastName": "Doe",
            "address": "123 Test Street",
            "city": "Testville",
            "state": "TX",
            "zipCode": "75001",
            "phone": "1234567890",
            "ssn": "123-45-6789",
            "username": "john.doe.test",
            "password": "Test@1234",
            "confirmPassword": "Test@1234",
        }
        return self._registration(defaults, overrides)

    def _random_ssn(self) -> str:
        """Random SSN in XXX-XX-XXXX format."""
        return (
            f"{self._random.randint(100, 999)}-"
            f"{self._random.randint(10, 99)}-"
            f"{self._random.randint(1000, 9999)}"
        )

    def _registration(
        self,
        defaults: Dict[str, Any],
        overrides: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        payload = self.merge(defaults, overrides)
        for name in REGISTRATION_FIELDS:
            if payload.get(name) is None:
                raise ValueError(f"Missing required field: {name}")
        return payload


# ================================================================================
# Product Payloads
# ================================================================================

class ProductPayloadFactory(PayloadFactoryBase):
    """Factory for catalog product payloads."""

    def create_valid(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        suffix = self._unique_suffix()
        defaults = {
            "name": f"Product {self.test_id} {suffix}",
            "description": "Test product description",
            "price": 99.99,
            "category": "Test Category",
            "sku": f"SKU-{self.test_id}-{suffix}",
        }
        return self.merge(defaults, overrides)


# ================================================================================
# Order Payloads
# ================================================================================

class OrderPayloadFactory(PayloadFactoryBase):
    """
    Factory for order payloads.

    Orders always reference an existing user and existing products.
    """

    def create_valid(
        self,
        user_id: str,
        product_ids: List[str],
        overrides: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create an order payload with one unit of each product.

        Args:
            user_id: Owning user id
            product_ids: Ordered product ids
            overrides: Fields replacing the defaults (e.g. custom quantities)
        """
        defaults = {
            "userId": user_id,
            "products": [
                {"productId": product_id, "quantity": 1}
                for product_id in product_ids
            ],
            "shippingAddress": dict(DEFAULT_SHIPPING_ADDRESS),
        }
        return self.merge(defaults, overrides)


__all__ = [
    "DEFAULT_PASSWORD",
    "DEFAULT_SHIPPING_ADDRESS",
    "REGISTRATION_FIELDS",
    "PayloadFactoryBase",
    "UserPayloadFactory",
    "ProductPayloadFactory",
    "OrderPayloadFactory",
]

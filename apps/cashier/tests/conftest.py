"""
Fixtures for cashier session tests.
"""

import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.catalog.models import Product, ProductVariant
from apps.cashier.services import open_session
from apps.sales.cart import Cart


# =============================================================================
# Operators & clients
# =============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def cashier(db):
    """Staff operator working the till."""
    return User.objects.create_user(
        username='kasir',
        password='TestPass123!',
        name='Kasir Pagi',
        role=UserRole.STAF,
    )


@pytest.fixture
def other_cashier(db):
    return User.objects.create_user(
        username='kasir2',
        password='TestPass123!',
        name='Kasir Sore',
        role=UserRole.STAF,
    )


@pytest.fixture
def store_admin(db):
    return User.objects.create_user(
        username='admin',
        password='TestPass123!',
        name='Store Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def inactive_cashier(db):
    return User.objects.create_user(
        username='former',
        password='TestPass123!',
        role=UserRole.STAF,
        is_active=False,
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def cashier_client(cashier):
    """API client authenticated as the cashier."""
    return _client_for(cashier)


@pytest.fixture
def other_cashier_client(other_cashier):
    return _client_for(other_cashier)


@pytest.fixture
def admin_client(store_admin):
    """API client authenticated as a store admin."""
    return _client_for(store_admin)


# =============================================================================
# Menu
# =============================================================================

@pytest.fixture
def coffee(db):
    """Kopi Susu at Rp 20.000 with size/ice variants."""
    product = Product.objects.create(name='Kopi Susu', price=Decimal('20000'))
    ProductVariant.objects.create(product=product, name='Size::Large')
    ProductVariant.objects.create(product=product, name='Ice::Less')
    return product


@pytest.fixture
def beans(db):
    """House blend bag at Rp 50.000."""
    return Product.objects.create(name='House Blend 250g', price=Decimal('50000'))


# =============================================================================
# Helpers
# =============================================================================

@pytest.fixture
def make_cart():
    """
    Build a cart from ``(product, quantity)`` pairs.

    Usage:
        cart = make_cart((coffee, 2), (beans, 1))
    """
    def _make(*pairs):
        cart = Cart()
        for product, quantity in pairs:
            cart.add_line(product, quantity=quantity)
        return cart
    return _make


@pytest.fixture
def open_till(cashier):
    """Cashier's session for today, opened with Rp 500.000."""
    return open_session(operator=cashier, opening_balance=Decimal('500000'))

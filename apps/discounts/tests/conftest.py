import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.catalog.models import Product, ProductVariant
from apps.sales.cart import Cart


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def cashier(db):
    return User.objects.create_user(
        username='kasir',
        password='TestPass123!',
        name='Kasir Pagi',
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
def cashier_client(cashier):
    """Staff can read and evaluate discounts but not write them."""
    return _client_for(cashier)


@pytest.fixture
def admin_client(store_admin):
    return _client_for(store_admin)


@pytest.fixture
def coffee(db):
    """Kopi Susu at Rp 20.000 with size/ice variants."""
    product = Product.objects.create(name='Kopi Susu', price=Decimal('20000'))
    ProductVariant.objects.create(product=product, name='Size::Large')
    ProductVariant.objects.create(product=product, name='Ice::Less')
    return product


@pytest.fixture
def cake(db):
    """Cheesecake at Rp 35.000."""
    return Product.objects.create(name='Cheesecake', price=Decimal('35000'))


@pytest.fixture
def retired_product(db):
    return Product.objects.create(name='Seasonal Latte', price=Decimal('30000'), is_active=False)


@pytest.fixture
def make_cart():
    """
    Build a cart from ``(product, quantity)`` pairs.

    Usage:
        cart = make_cart((coffee, 2), (cake, 1))
    """
    def _make(*pairs):
        cart = Cart()
        for product, quantity in pairs:
            cart.add_line(product, quantity=quantity)
        return cart
    return _make

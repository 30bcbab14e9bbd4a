import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole


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


@pytest.fixture
def cashier_client(cashier):
    """API client authenticated with the cashier's access token."""
    client = APIClient()
    refresh = RefreshToken.for_user(cashier)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_client(store_admin):
    client = APIClient()
    refresh = RefreshToken.for_user(store_admin)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client

import pytest
from decimal import Decimal

from apps.catalog.models import Product, ProductVariant, ProductExtra


@pytest.fixture
def coffee(db):
    """Kopi Susu at Rp 20.000 with size/ice variants."""
    product = Product.objects.create(name='Kopi Susu', price=Decimal('20000'))
    ProductVariant.objects.create(product=product, name='Size::Large')
    ProductVariant.objects.create(product=product, name='Ice::Less')
    return product


@pytest.fixture
def extra_shot(coffee):
    return ProductExtra.objects.create(product=coffee, name='Extra Shot', price=Decimal('5000'))


@pytest.fixture
def cake(db):
    """Cheesecake at Rp 35.000."""
    return Product.objects.create(name='Cheesecake', price=Decimal('35000'))


@pytest.fixture
def retired_product(db):
    return Product.objects.create(name='Seasonal Latte', price=Decimal('30000'), is_active=False)

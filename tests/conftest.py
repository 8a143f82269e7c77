"""Shared fixtures for order and inventory tests."""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from inventory.models import Product
from order.services import OrderService


SHIPPING = {
    'street_address': '12 Durbar Marg',
    'city': 'Kathmandu',
    'postal_code': '44600',
    'phone': '9800000000',
}


@pytest.fixture
def customer(django_user_model):
    return django_user_model.objects.create_user(
        username='customer', email='customer@example.com', password='secret', first_name='Asha'
    )


@pytest.fixture
def other_customer(django_user_model):
    return django_user_model.objects.create_user(
        username='other', email='other@example.com', password='secret'
    )


@pytest.fixture
def make_product(db):
    def _make(name='Carved Elephant', price='100.00', stock=5, is_active=True):
        return Product.objects.create(
            name=name, price=Decimal(price), stock_quantity=stock, is_active=is_active
        )
    return _make


@pytest.fixture
def product_a(make_product):
    return make_product(name='Product A', price='100.00', stock=5)


@pytest.fixture
def product_b(make_product):
    return make_product(name='Product B', price='50.00', stock=3)


@pytest.fixture
def shipping_address():
    return dict(SHIPPING)


@pytest.fixture
def place_order(customer, shipping_address):
    def _place(items, user=None, **kwargs):
        kwargs.setdefault('payment_method', 'cash_on_delivery')
        return OrderService(user or customer).create_order(
            shipping_address=dict(shipping_address), items=items, **kwargs
        )
    return _place


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer):
    api_client.force_authenticate(user=customer)
    return api_client


@pytest.fixture
def admin_api_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client

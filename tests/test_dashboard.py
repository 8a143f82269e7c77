"""Dashboard aggregation and redis cache degradation."""
import json
from unittest import mock

import pytest
import redis

from order.cache_manager import CacheManager
from order.dashboard import DashboardAggregator
from order.models import Order


def test_cache_roundtrip_uses_hashed_key():
    client = mock.Mock()
    cache = CacheManager(redis_client=client)

    cache.set_json('dashboard', {'year': 2026}, {'total': 1}, ttl=30)

    key, value = client.set.call_args.args
    assert key.startswith('dashboard:')
    assert json.loads(value) == {'total': 1}
    assert client.set.call_args.kwargs == {'ex': 30}

    client.get.return_value = value
    assert cache.get_json('dashboard', {'year': 2026}) == {'total': 1}
    client.get.assert_called_with(key)


def test_cache_degrades_when_redis_is_down():
    client = mock.Mock()
    client.get.side_effect = redis.exceptions.ConnectionError('refused')
    client.set.side_effect = redis.exceptions.ConnectionError('refused')
    cache = CacheManager(redis_client=client)

    assert cache.get_json('dashboard', {}) is None
    cache.set_json('dashboard', {}, {'total': 1})


@pytest.mark.django_db
def test_stats_prefers_cached_payload():
    cache = mock.Mock()
    cache.get_json.return_value = {'overview': {'totalOrders': 42}}

    assert DashboardAggregator(cache=cache).stats() == {'overview': {'totalOrders': 42}}
    cache.set_json.assert_not_called()


@pytest.mark.django_db
def test_stats_aggregates_orders(customer, product_a, product_b, place_order, make_product):
    make_product(name='Plenty', stock=50)
    place_order([{'product_id': product_a.pk, 'quantity': 2}])
    cancelled = place_order([{'product_id': product_b.pk, 'quantity': 1}])
    Order.objects.filter(pk=cancelled.pk).update(status=Order.Status.CANCELLED)

    cache = mock.Mock()
    cache.get_json.return_value = None
    stats = DashboardAggregator(cache=cache).stats()

    overview = stats['overview']
    assert overview['totalProducts'] == 3
    assert overview['totalOrders'] == 2
    assert overview['pendingOrders'] == 1
    assert overview['totalRevenue'] == 200.0
    assert overview['totalUsers'] == 1
    assert [p['name'] for p in stats['lowStockProducts']] == ['Product B', 'Product A']
    assert [(p['name'], p['totalSold']) for p in stats['topProducts']] == [('Product A', 2), ('Product B', 1)]
    assert sum(m['revenue'] for m in stats['monthlyRevenue']) == 200.0
    assert stats['recentOrders'][0]['customerName'] == 'Asha'
    cache.set_json.assert_called_once()

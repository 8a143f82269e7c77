"""Stock validation, ledger and bulk correction tests."""
from unittest import mock

import pytest

from inventory.models import AppendOnlyError, InventoryLog, Product
from inventory.services import (
    InventoryLedger,
    StockValidator,
    bulk_adjust_stock,
    normalize_lines,
)
from storefront.errors import (
    InsufficientStockError,
    ProductNotFoundError,
    RequestValidationError,
)

pytestmark = pytest.mark.django_db


def test_normalize_lines_merges_duplicates_in_submission_order():
    lines = normalize_lines([
        {'product_id': 7, 'quantity': 1},
        {'product_id': 3, 'quantity': 2},
        {'product_id': 7, 'quantity': 4},
    ])
    assert lines == [(7, 5), (3, 2)]


@pytest.mark.parametrize('quantity', [0, -1, 1.5, None, True])
def test_normalize_lines_rejects_non_positive_quantity(quantity):
    with pytest.raises(RequestValidationError):
        normalize_lines([{'product_id': 1, 'quantity': quantity}])


def test_reserve_decrements_and_reports_quantities(product_a, product_b):
    reservations = StockValidator().reserve([(product_a.pk, 2), (product_b.pk, 1)])

    assert [(r.product.pk, r.previous_quantity, r.new_quantity) for r in reservations] == [
        (product_a.pk, 5, 3),
        (product_b.pk, 3, 2),
    ]
    product_a.refresh_from_db()
    product_b.refresh_from_db()
    assert product_a.stock_quantity == 3
    assert product_b.stock_quantity == 2


def test_reserve_is_all_or_nothing(product_a, product_b):
    with pytest.raises(InsufficientStockError) as excinfo:
        StockValidator().reserve([(product_a.pk, 2), (product_b.pk, 10)])

    assert excinfo.value.available == 3
    assert excinfo.value.shortfall == 7
    product_a.refresh_from_db()
    product_b.refresh_from_db()
    assert product_a.stock_quantity == 5
    assert product_b.stock_quantity == 3


def test_reserve_rejects_inactive_and_missing_products(product_a, make_product):
    hidden = make_product(name='Hidden', stock=10, is_active=False)

    with pytest.raises(ProductNotFoundError):
        StockValidator().reserve([(product_a.pk, 1), (hidden.pk, 1)])
    with pytest.raises(ProductNotFoundError):
        StockValidator().reserve([(product_a.pk, 1), (999999, 1)])

    product_a.refresh_from_db()
    assert product_a.stock_quantity == 5


def test_second_checkout_cannot_oversell(product_a):
    validator = StockValidator()
    validator.reserve([(product_a.pk, 4)])

    with pytest.raises(InsufficientStockError):
        validator.reserve([(product_a.pk, 4)])

    product_a.refresh_from_db()
    assert product_a.stock_quantity == 1


def _change_after_read(product, **changes):
    # another writer changes the row between our read and our decrement
    real_in_bulk = Product.objects.in_bulk

    def stale_in_bulk(*args, **kwargs):
        products = real_in_bulk(*args, **kwargs)
        Product.objects.filter(pk=product.pk).update(**changes)
        return products

    return mock.patch.object(Product.objects, 'in_bulk', side_effect=stale_in_bulk)


def test_conditional_decrement_ignores_stale_read(product_a):
    with _change_after_read(product_a, stock_quantity=1):
        with pytest.raises(InsufficientStockError) as excinfo:
            StockValidator().reserve([(product_a.pk, 4)])

    assert excinfo.value.available == 1
    assert excinfo.value.shortfall == 3
    # the simulated write ran inside the reserve savepoint and was rolled back with it
    product_a.refresh_from_db()
    assert product_a.stock_quantity == 5
    assert not InventoryLog.objects.exists()


def test_product_deactivated_after_read_is_not_found(product_a):
    with _change_after_read(product_a, is_active=False):
        with pytest.raises(ProductNotFoundError):
            StockValidator().reserve([(product_a.pk, 1)])

    product_a.refresh_from_db()
    assert product_a.stock_quantity == 5


def test_ledger_rejects_inconsistent_entry(product_a):
    with pytest.raises(ValueError):
        InventoryLedger().append(product_a, InventoryLog.ChangeType.ADD, 2, 5, 8, reason='typo')
    assert not InventoryLog.objects.exists()


def test_ledger_entries_are_append_only(product_a):
    entry = InventoryLedger().append(product_a, InventoryLog.ChangeType.ADD, 2, 5, 7, reason='found')

    entry.reason = 'edited'
    with pytest.raises(AppendOnlyError):
        entry.save()
    with pytest.raises(AppendOnlyError):
        entry.delete()
    with pytest.raises(AppendOnlyError):
        InventoryLog.objects.filter(pk=entry.pk).update(reason='edited')
    with pytest.raises(AppendOnlyError):
        InventoryLog.objects.all().delete()

    assert InventoryLog.objects.get(pk=entry.pk).reason == 'found'


def test_bulk_adjust_restock(admin_user, make_product):
    product = make_product(name='Product A', stock=3)

    [adjustment] = bulk_adjust_stock([(product.pk, 10, 'restock')], actor=admin_user)

    assert adjustment.previous_stock == 3
    assert adjustment.new_stock == 10
    assert adjustment.change == 7
    assert adjustment.name == 'Product A'

    entry = InventoryLog.objects.get(product=product)
    assert entry.change_type == InventoryLog.ChangeType.ADD
    assert entry.quantity_change == 7
    assert entry.previous_quantity == 3
    assert entry.new_quantity == 10
    assert entry.reason == 'restock'
    assert entry.changed_by == admin_user


def test_bulk_adjust_decrease_uses_remove_and_default_reason(product_a):
    bulk_adjust_stock([(product_a.pk, 1, None)])

    entry = InventoryLog.objects.get(product=product_a)
    assert entry.change_type == InventoryLog.ChangeType.REMOVE
    assert entry.quantity_change == -4
    assert entry.reason == 'Bulk stock update'
    assert entry.changed_by is None


def test_bulk_adjust_rejects_whole_batch_on_missing_product(product_a, product_b):
    with pytest.raises(ProductNotFoundError):
        bulk_adjust_stock([(product_a.pk, 20, ''), (999999, 1, ''), (product_b.pk, 0, '')])

    product_a.refresh_from_db()
    product_b.refresh_from_db()
    assert (product_a.stock_quantity, product_b.stock_quantity) == (5, 3)
    assert not InventoryLog.objects.exists()


def test_bulk_adjust_rejects_negative_stock(product_a):
    with pytest.raises(RequestValidationError):
        bulk_adjust_stock([(product_a.pk, -1, '')])


def test_bulk_adjust_repeated_product_chains_quantities(product_a):
    bulk_adjust_stock([(product_a.pk, 8, 'count'), (product_a.pk, 6, 'recount')])

    entries = list(InventoryLog.objects.filter(product=product_a).order_by('id'))
    assert [(e.previous_quantity, e.new_quantity) for e in entries] == [(5, 8), (8, 6)]
    product_a.refresh_from_db()
    assert product_a.stock_quantity == 6


def test_query_filters_by_product_newest_first(product_a, product_b):
    bulk_adjust_stock([(product_a.pk, 6, 'one')])
    bulk_adjust_stock([(product_b.pk, 4, 'two')])
    bulk_adjust_stock([(product_a.pk, 7, 'three')])

    logs = InventoryLedger().query(product_id=product_a.pk)
    assert [log.reason for log in logs] == ['three', 'one']
    assert len(InventoryLedger().query(page=2, limit=2)) == 1

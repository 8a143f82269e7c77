import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from storefront.errors import (
    InsufficientStockError,
    ProductNotFoundError,
    RequestValidationError,
)
from .models import InventoryLog, Product

logger = logging.getLogger('django')

DEFAULT_BULK_REASON = 'Bulk stock update'


@dataclass(frozen=True)
class StockReservation:
    """一次成功扣减的结果，库存前后值在同一事务中取得"""
    product: Product
    quantity: int
    previous_quantity: int
    new_quantity: int


@dataclass(frozen=True)
class StockAdjustment:
    product_id: int
    name: str
    previous_stock: int
    new_stock: int
    change: int


def _positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def normalize_lines(items):
    """把请求中的商品行整理成 [(product_id, quantity)]

    同一商品出现多次时数量合并，按首次出现的顺序返回。
    """
    merged = {}
    for item in items:
        product_id = item.get('product_id')
        quantity = item.get('quantity')
        if not _positive_int(product_id):
            raise RequestValidationError('items', f'Invalid product id: {product_id!r}')
        if not _positive_int(quantity):
            raise RequestValidationError(
                'items', f'Quantity for product {product_id} must be a positive integer'
            )
        merged[product_id] = merged.get(product_id, 0) + quantity
    return list(merged.items())


class StockValidator:
    """批量校验并扣减库存，全部成功或全部不生效"""

    def reserve(self, lines):
        reservations = []
        with transaction.atomic():
            products = Product.objects.in_bulk([product_id for product_id, _ in lines])

            for product_id, quantity in lines:
                product = products.get(product_id)
                if product is None or not product.is_active:
                    raise ProductNotFoundError(product_id)

                # 条件扣减：库存不足时 UPDATE 影响 0 行，不需要显式加锁
                updated = Product.objects.filter(
                    pk=product_id,
                    is_active=True,
                    stock_quantity__gte=quantity,
                ).update(
                    stock_quantity=F('stock_quantity') - quantity,
                    updated_at=timezone.now(),
                )
                if not updated:
                    # 0 行可能是库存不足，也可能是读取之后商品被下架或删除
                    current = (
                        Product.objects.filter(pk=product_id)
                        .values_list('stock_quantity', 'is_active')
                        .first()
                    )
                    if current is None or not current[1]:
                        logger.warning(f"product became unavailable during checkout: product={product_id}")
                        raise ProductNotFoundError(product_id)
                    available = current[0]
                    logger.warning(
                        f"insufficient stock: product={product_id} requested={quantity} available={available}"
                    )
                    raise InsufficientStockError(product_id, product.name, quantity, available)

                # 上面的 UPDATE 已对该行加写锁，其他事务在本事务提交前无法修改它，
                # 所以这里的读取仍属于同一次扣减，不会读到并发写入的值
                new_quantity = Product.objects.values_list('stock_quantity', flat=True).get(pk=product_id)
                product.stock_quantity = new_quantity
                reservations.append(
                    StockReservation(
                        product=product,
                        quantity=quantity,
                        previous_quantity=new_quantity + quantity,
                        new_quantity=new_quantity,
                    )
                )

        return reservations


class InventoryLedger:
    """库存流水，只提供追加和查询"""

    def append(self, product, change_type, quantity_change, previous_quantity,
               new_quantity, reason='', actor=None):
        if new_quantity != previous_quantity + quantity_change:
            raise ValueError(
                f"Inconsistent ledger entry for product {product.pk}: "
                f"{previous_quantity} {quantity_change:+d} != {new_quantity}"
            )
        return InventoryLog.objects.create(
            product=product,
            change_type=change_type,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            reason=reason,
            changed_by=actor,
        )

    def record_sale(self, reservation, order_number, actor=None):
        return self.append(
            reservation.product,
            InventoryLog.ChangeType.SOLD,
            -reservation.quantity,
            reservation.previous_quantity,
            reservation.new_quantity,
            reason=f'Order #{order_number}',
            actor=actor,
        )

    def query(self, product_id=None, page=1, limit=50):
        logs = InventoryLog.objects.select_related('product', 'changed_by')
        if product_id is not None:
            logs = logs.filter(product_id=product_id)
        offset = (page - 1) * limit
        return list(logs[offset:offset + limit])


def bulk_adjust_stock(updates, actor=None):
    """管理员批量设置库存

    updates: [(product_id, new_stock, reason)]，任一商品不存在则整批不生效。
    """
    if not updates:
        raise RequestValidationError('updates', 'Updates must be a non-empty array')
    for product_id, new_stock, _ in updates:
        if not isinstance(new_stock, int) or isinstance(new_stock, bool) or new_stock < 0:
            raise RequestValidationError(
                'updates', f'New stock for product {product_id} must be a non-negative integer'
            )

    ledger = InventoryLedger()
    adjustments = []
    with transaction.atomic():
        # 按 id 排序加锁，避免并发批量更新互相死锁
        product_ids = sorted({product_id for product_id, _, _ in updates})
        products = {
            p.pk: p
            for p in Product.objects.select_for_update().filter(pk__in=product_ids).order_by('pk')
        }
        for product_id in product_ids:
            if product_id not in products:
                raise ProductNotFoundError(product_id)

        for product_id, new_stock, reason in updates:
            product = products[product_id]
            previous_stock = product.stock_quantity
            change = new_stock - previous_stock

            product.stock_quantity = new_stock
            product.save(update_fields=['stock_quantity', 'updated_at'])

            ledger.append(
                product,
                InventoryLog.ChangeType.ADD if change > 0 else InventoryLog.ChangeType.REMOVE,
                change,
                previous_stock,
                new_stock,
                reason=reason or DEFAULT_BULK_REASON,
                actor=actor,
            )
            adjustments.append(
                StockAdjustment(
                    product_id=product_id,
                    name=product.name,
                    previous_stock=previous_stock,
                    new_stock=new_stock,
                    change=change,
                )
            )

    logger.info(f"bulk stock update: {len(adjustments)} products by user={getattr(actor, 'pk', None)}")
    return adjustments

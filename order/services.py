import logging
import secrets
import string
import time
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count

from inventory.models import Product
from inventory.services import InventoryLedger, StockValidator, normalize_lines
from storefront.db import partial_update
from storefront.errors import (
    OrderNotFoundError,
    ProductsUnavailableError,
    RequestValidationError,
)
from . import lifecycle
from .models import AddressSnapshot, Order, OrderItem

logger = logging.getLogger('django')

REQUIRED_ADDRESS_FIELDS = ('street_address', 'city', 'postal_code')
ADDRESS_FIELDS = frozenset(REQUIRED_ADDRESS_FIELDS + ('state', 'country', 'phone'))
ORDER_UPDATE_FIELDS = frozenset({'notes'})

_TOKEN_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number():
    """订单号: <前缀>-<毫秒时间戳后6位>-<6位随机串>"""
    timestamp = str(int(time.time() * 1000))[-6:]
    token = ''.join(secrets.choice(_TOKEN_ALPHABET) for _ in range(6))
    return f"{settings.ORDER_NUMBER_PREFIX}-{timestamp}-{token}"


def _unique_order_number():
    # 唯一索引是最终保证，这里只是避免在事务里撞上 IntegrityError
    for _ in range(5):
        number = generate_order_number()
        if not Order.objects.filter(order_number=number).exists():
            return number
    raise RuntimeError("Could not generate a unique order number")


def validate_address(fields, field_name):
    if not isinstance(fields, dict):
        raise RequestValidationError(field_name, 'Address is required')
    for name in REQUIRED_ADDRESS_FIELDS:
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            label = name.replace('_', ' ').capitalize()
            raise RequestValidationError(f'{field_name}.{name}', f'{label} is required')


def _clean_address(fields):
    # 新建和修改走同一套规整：去空白，国家留空时用默认国家
    values = {
        name: value.strip() if isinstance(value, str) else value
        for name, value in fields.items()
        if name in ADDRESS_FIELDS and value is not None
    }
    if 'country' in values and not values['country']:
        values['country'] = settings.DEFAULT_COUNTRY
    return values


def capture_address(fields, user, address_type):
    """为订单保存一份地址快照"""
    validate_address(fields, f'{address_type}_address')
    values = _clean_address(fields)
    values.setdefault('country', settings.DEFAULT_COUNTRY)
    return AddressSnapshot.objects.create(user=user, address_type=address_type, **values)


def update_address_while_pending(order, fields):
    """待确认订单可以修改收货地址快照，其余状态一律拒绝"""
    lifecycle.check_editable(order)
    values = _clean_address(fields)
    for name in REQUIRED_ADDRESS_FIELDS:
        if name in fields and not (isinstance(values.get(name), str) and values[name]):
            raise RequestValidationError(f'shipping_address.{name}', f'{name} cannot be blank')
    partial_update(AddressSnapshot, order.shipping_address_id, values, ADDRESS_FIELDS)


class OrderService:
    def __init__(self, user):
        self.user = user
        self.stock_validator = StockValidator()
        self.ledger = InventoryLedger()

    def create_order(self, shipping_address, payment_method, items,
                     billing_address=None, notes=None):
        # 1. 请求校验
        validate_address(shipping_address, 'shipping_address')
        if billing_address:
            validate_address(billing_address, 'billing_address')
        if payment_method not in settings.ACCEPTED_PAYMENT_METHODS:
            raise RequestValidationError('payment_method', 'Valid payment method is required')
        if not items:
            raise RequestValidationError('items', 'Order must contain at least one item')
        lines = normalize_lines(items)

        with transaction.atomic():
            # 2. 一次查询取出全部商品，数量对不上说明有商品不存在或已下架
            product_ids = [product_id for product_id, _ in lines]
            products = Product.objects.filter(pk__in=product_ids, is_active=True).in_bulk()
            if len(products) != len(product_ids):
                raise ProductsUnavailableError(pid for pid in product_ids if pid not in products)

            # 3. 校验并扣减库存
            reservations = self.stock_validator.reserve(lines)

            # 4. 地址快照，未提供账单地址时复用收货地址
            shipping = capture_address(shipping_address, self.user, AddressSnapshot.AddressType.SHIPPING)
            billing = shipping
            if billing_address:
                billing = capture_address(billing_address, self.user, AddressSnapshot.AddressType.BILLING)

            # 5. 订单号
            order_number = _unique_order_number()

            # 6. 按商品当前价格计算金额，不信任客户端价格
            total_amount = sum(
                (products[product_id].price * quantity for product_id, quantity in lines),
                Decimal('0.00'),
            )

            # 7. 订单及明细
            order = Order.objects.create(
                order_number=order_number,
                user=self.user,
                total_amount=total_amount,
                payment_method=payment_method,
                shipping_address=shipping,
                billing_address=billing,
                notes=notes or '',
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=products[product_id],
                    product_name=products[product_id].name,
                    quantity=quantity,
                    unit_price=products[product_id].price,
                )
                for product_id, quantity in lines
            ])

            # 8. 库存流水
            for reservation in reservations:
                self.ledger.record_sale(reservation, order_number, actor=self.user)

        logger.info(f"order created: {order.order_number} user={self.user.pk} total={order.total_amount}")
        return order

    def list_orders(self):
        return list(
            Order.objects.filter(user=self.user)
            .annotate(item_count=Count('items'))
            .order_by('-created_at', '-id')
        )

    def get_order(self, order_id):
        order = (
            Order.objects.select_related('shipping_address', 'billing_address')
            .prefetch_related('items')
            .filter(pk=order_id, user=self.user)
            .first()
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _lock_own_order(self, order_id):
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(order_id)
        lifecycle.check_owner(order, self.user)
        return order

    def cancel(self, order_id, now=None):
        """顾客自助取消，不回补库存"""
        with transaction.atomic():
            order = self._lock_own_order(order_id)
            lifecycle.check_cancellable(order, now=now)
            partial_update(Order, order.pk, {'status': Order.Status.CANCELLED}, {'status'})
            order.refresh_from_db(fields=['status', 'updated_at'])

        logger.info(f"order cancelled by customer: {order.order_number}")
        return order

    def update(self, order_id, shipping_address=None, notes=None):
        if not shipping_address and notes is None:
            raise RequestValidationError('fields', 'No fields to update')

        with transaction.atomic():
            order = self._lock_own_order(order_id)
            lifecycle.check_editable(order)
            if shipping_address:
                update_address_while_pending(order, shipping_address)
            if notes is not None:
                partial_update(Order, order.pk, {'notes': notes}, ORDER_UPDATE_FIELDS)

        logger.info(f"order updated by customer: {order.order_number}")
        return self.get_order(order.pk)

    def delete(self, order_id):
        with transaction.atomic():
            order = self._lock_own_order(order_id)
            lifecycle.check_deletable(order)
            snapshot_ids = {order.shipping_address_id, order.billing_address_id}
            order_number = order.order_number
            # 明细随订单级联删除，快照被订单 RESTRICT 引用，需在订单之后删除
            order.delete()
            AddressSnapshot.objects.filter(pk__in=snapshot_ids).delete()

        logger.info(f"order deleted by customer: {order_number}")


def list_all_orders(status=None, payment_status=None, page=1, limit=20):
    """管理员订单列表"""
    orders = Order.objects.select_related('user').annotate(item_count=Count('items'))
    if status:
        orders = orders.filter(status=status)
    if payment_status:
        orders = orders.filter(payment_status=payment_status)
    offset = (page - 1) * limit
    return list(orders.order_by('-created_at', '-id')[offset:offset + limit])

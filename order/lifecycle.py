"""订单状态流转

正常流程由管理员推进：pending -> confirmed -> shipped -> delivered。
任何未终结状态都可以转为 cancelled；delivered 和 cancelled 为终态。

注意：update_status 是管理员的人工干预入口，只校验状态值是否合法，
不按 TRANSITIONS 拦截。TRANSITIONS 仅用于顾客侧的前置条件检查和日志告警，
不要把它改成严格的状态机，否则会改变后台已有的行为。
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from storefront.db import partial_update
from storefront.errors import (
    AlreadyCancelledError,
    CancellationWindowExpiredError,
    ForbiddenError,
    OrderNotEditableError,
    OrderNotFoundError,
    RequestValidationError,
)
from .models import Order

logger = logging.getLogger('django')

Status = Order.Status

TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
    Status.CONFIRMED: {Status.SHIPPED, Status.CANCELLED},
    Status.SHIPPED: {Status.DELIVERED, Status.CANCELLED},
    Status.DELIVERED: set(),
    Status.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
EDITABLE_STATUSES = frozenset({Status.PENDING})
DELETABLE_STATUSES = frozenset({Status.CANCELLED, Status.DELIVERED})

STATUS_UPDATE_FIELDS = frozenset({'status', 'payment_status'})


def is_documented_transition(current, new):
    return current == new or new in TRANSITIONS.get(current, set())


def check_owner(order, user):
    if order.user_id != user.pk:
        raise ForbiddenError()


def check_editable(order):
    if order.status not in EDITABLE_STATUSES:
        raise OrderNotEditableError(order.pk, order.status, 'update')


def check_deletable(order):
    if order.status not in DELETABLE_STATUSES:
        raise OrderNotEditableError(order.pk, order.status, 'delete')


def check_cancellable(order, now=None):
    """顾客自助取消的前置条件 (归属校验由调用方先做)"""
    if order.status == Status.CANCELLED:
        raise AlreadyCancelledError(order.pk)
    if order.status in TERMINAL_STATUSES:
        raise OrderNotEditableError(order.pk, order.status, 'cancel')

    window = settings.ORDER_CANCELLATION_WINDOW
    now = now or timezone.now()
    # 边界值 (恰好等于窗口) 仍允许取消
    if now - order.created_at > window:
        raise CancellationWindowExpiredError(order.pk, window.total_seconds() / 3600)


def update_status(order_id, status, payment_status=None):
    """管理员修改订单状态 / 支付状态"""
    if status not in Status.values:
        raise RequestValidationError('status', f'Invalid status: {status!r}')
    if payment_status is not None and payment_status not in Order.PaymentStatus.values:
        raise RequestValidationError('paymentStatus', f'Invalid payment status: {payment_status!r}')

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(order_id)

        if not is_documented_transition(order.status, status):
            logger.warning(
                f"admin override: order {order.order_number} moved {order.status} -> {status}"
            )

        partial_update(
            Order,
            order.pk,
            {'status': status, 'payment_status': payment_status},
            STATUS_UPDATE_FIELDS,
        )
        order.refresh_from_db(fields=['status', 'payment_status', 'updated_at'])

    logger.info(f"order {order.order_number} status={order.status} payment_status={order.payment_status}")
    return order

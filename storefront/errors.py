"""业务异常定义

service 层抛出这些异常，API 层由 storefront.handlers 统一转换为 HTTP 响应。
"""


class StorefrontError(Exception):
    """所有业务异常的基类"""

    status_code = 400
    code = 'error'

    def __init__(self, message, **details):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self):
        payload = {'success': False, 'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class RequestValidationError(StorefrontError):
    """请求字段缺失或格式错误"""

    code = 'validation_error'

    def __init__(self, field, message):
        self.field = field
        super().__init__(message, field=field)


class ProductNotFoundError(StorefrontError):
    status_code = 404
    code = 'product_not_found'

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f'Product with ID {product_id} not found', productId=product_id)


class ProductsUnavailableError(StorefrontError):
    code = 'products_unavailable'

    def __init__(self, missing_ids):
        self.missing_ids = list(missing_ids)
        super().__init__(
            'Some products are no longer available',
            productIds=self.missing_ids,
        )


class InsufficientStockError(StorefrontError):
    """库存不足，携带可用数量用于前端提示"""

    code = 'insufficient_stock'

    def __init__(self, product_id, product_name, requested, available):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f'Insufficient stock for {product_name}. Only {available} available.',
            productId=product_id,
            requested=requested,
            available=available,
            shortfall=self.shortfall,
        )

    @property
    def shortfall(self):
        return self.requested - self.available


class OrderNotFoundError(StorefrontError):
    status_code = 404
    code = 'order_not_found'

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__('Order not found', orderId=order_id)


class ForbiddenError(StorefrontError):
    status_code = 403
    code = 'forbidden'

    def __init__(self, message='You do not have permission to modify this order'):
        super().__init__(message)


class OrderNotEditableError(StorefrontError):
    """订单当前状态不允许该操作"""

    code = 'order_not_editable'

    def __init__(self, order_id, status, operation):
        self.order_id = order_id
        self.status = status
        self.operation = operation
        super().__init__(
            f'Cannot {operation} an order with status "{status}"',
            orderId=order_id,
            status=status,
        )


class AlreadyCancelledError(StorefrontError):
    code = 'already_cancelled'

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__('Order is already cancelled', orderId=order_id)


class CancellationWindowExpiredError(StorefrontError):
    code = 'cancellation_window_expired'

    def __init__(self, order_id, window_hours):
        self.order_id = order_id
        self.window_hours = window_hours
        super().__init__(
            f'Orders can only be cancelled within {window_hours:g} hours of placement',
            orderId=order_id,
        )

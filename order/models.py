from django.conf import settings
from django.db import models

from inventory.models import Product


def default_country():
    return settings.DEFAULT_COUNTRY


class AddressSnapshot(models.Model):
    """下单时的地址快照 (与用户地址簿无关，只属于创建它的订单)"""

    class AddressType(models.TextChoices):
        SHIPPING = 'shipping', '收货地址'
        BILLING = 'billing', '账单地址'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='address_snapshots', on_delete=models.CASCADE)
    address_type = models.CharField(max_length=10, choices=AddressType.choices)
    street_address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100, blank=True, default='')
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100, default=default_country)
    phone = models.CharField(max_length=30, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.street_address}, {self.city} {self.postal_code}"


class Order(models.Model):
    """订单主表"""

    class Status(models.TextChoices):
        PENDING = 'pending', '待确认'
        CONFIRMED = 'confirmed', '已确认'
        SHIPPED = 'shipped', '已发货'
        DELIVERED = 'delivered', '已送达'
        CANCELLED = 'cancelled', '已取消'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', '待支付'
        PAID = 'paid', '已支付'
        FAILED = 'failed', '支付失败'
        REFUNDED = 'refunded', '已退款'

    class PaymentMethod(models.TextChoices):
        CASH_ON_DELIVERY = 'cash_on_delivery', '货到付款'

    order_number = models.CharField(max_length=32, unique=True, verbose_name="订单号")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='orders', on_delete=models.CASCADE, verbose_name="用户")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=30, choices=PaymentMethod.choices)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, verbose_name="下单时总金额")
    shipping_address = models.ForeignKey(AddressSnapshot, related_name='+', on_delete=models.RESTRICT)
    billing_address = models.ForeignKey(AddressSnapshot, related_name='+', on_delete=models.RESTRICT)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.order_number} ({self.status})"


class OrderItem(models.Model):
    """订单明细表"""
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    # 弱引用：商品下架或删除后订单明细依然完整
    product = models.ForeignKey(Product, related_name='order_items', null=True, on_delete=models.SET_NULL)
    product_name = models.CharField(max_length=200, verbose_name="下单时商品名称")
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="下单时价格")

    class Meta:
        ordering = ['id']

    @property
    def subtotal(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity}x {self.product_name}"

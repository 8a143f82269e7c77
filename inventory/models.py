from django.conf import settings
from django.db import models


class Product(models.Model):
    """商品表 (库存只允许通过 inventory.services 修改)"""
    name = models.CharField(max_length=200, verbose_name="商品名称")
    price = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="价格")
    stock_quantity = models.PositiveIntegerField(default=0, verbose_name="库存数量")
    is_active = models.BooleanField(default=True, db_index=True, verbose_name="是否上架")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name='product_stock_quantity_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.name} - 库存: {self.stock_quantity}"


class AppendOnlyError(Exception):
    pass


class InventoryLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise AppendOnlyError("Inventory log entries cannot be updated")

    def delete(self):
        raise AppendOnlyError("Inventory log entries cannot be deleted")


class InventoryLog(models.Model):
    """库存流水 (只追加，不修改不删除)"""

    class ChangeType(models.TextChoices):
        SOLD = 'sold', '售出'
        ADD = 'add', '入库'
        REMOVE = 'remove', '出库'

    product = models.ForeignKey(Product, related_name='inventory_logs', on_delete=models.PROTECT)
    change_type = models.CharField(max_length=10, choices=ChangeType.choices)
    quantity_change = models.IntegerField(verbose_name="变动数量")
    previous_quantity = models.PositiveIntegerField(verbose_name="变动前库存")
    new_quantity = models.PositiveIntegerField(verbose_name="变动后库存")
    reason = models.CharField(max_length=255, blank=True, default='')
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name='inventory_logs',
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = InventoryLogQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.product_id} {self.change_type} {self.quantity_change:+d}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise AppendOnlyError("Inventory log entries cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("Inventory log entries cannot be deleted")

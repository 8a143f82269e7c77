from rest_framework import serializers

from .models import InventoryLog


class StockUpdateSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source='product_id', min_value=1)
    newStock = serializers.IntegerField(source='new_stock', min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class BulkStockUpdateSerializer(serializers.Serializer):
    updates = StockUpdateSerializer(many=True, allow_empty=False)


class StockAdjustmentSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source='product_id')
    name = serializers.CharField()
    previousStock = serializers.IntegerField(source='previous_stock')
    newStock = serializers.IntegerField(source='new_stock')
    change = serializers.IntegerField()


class InventoryLogSerializer(serializers.ModelSerializer):
    productId = serializers.IntegerField(source='product_id')
    productName = serializers.CharField(source='product.name')
    changeType = serializers.CharField(source='change_type')
    quantityChange = serializers.IntegerField(source='quantity_change')
    previousQuantity = serializers.IntegerField(source='previous_quantity')
    newQuantity = serializers.IntegerField(source='new_quantity')
    changedBy = serializers.IntegerField(source='changed_by_id', allow_null=True)
    changedByName = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = InventoryLog
        fields = [
            'id', 'productId', 'productName', 'changeType', 'quantityChange',
            'previousQuantity', 'newQuantity', 'reason', 'changedBy', 'changedByName', 'createdAt',
        ]

    def get_changedByName(self, log):
        if log.changed_by is None:
            return None
        return log.changed_by.get_full_name() or log.changed_by.get_username()

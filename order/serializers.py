from rest_framework import serializers

from .models import AddressSnapshot, Order, OrderItem


class AddressInputSerializer(serializers.Serializer):
    # 必填项由 service 校验，便于返回具体的缺失字段
    streetAddress = serializers.CharField(source='street_address', required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    postalCode = serializers.CharField(source='postal_code', required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)


class OrderLineSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source='product_id', min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    shippingAddress = AddressInputSerializer(source='shipping_address')
    billingAddress = AddressInputSerializer(source='billing_address', required=False, allow_null=True)
    paymentMethod = serializers.CharField(source='payment_method')
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderLineSerializer(many=True, allow_empty=True)


class OrderUpdateSerializer(serializers.Serializer):
    shippingAddress = AddressInputSerializer(source='shipping_address', required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    paymentStatus = serializers.ChoiceField(
        source='payment_status', choices=Order.PaymentStatus.choices, required=False
    )


class AddressSnapshotSerializer(serializers.ModelSerializer):
    streetAddress = serializers.CharField(source='street_address')
    postalCode = serializers.CharField(source='postal_code')

    class Meta:
        model = AddressSnapshot
        fields = ['streetAddress', 'city', 'state', 'postalCode', 'country', 'phone']


class OrderItemSerializer(serializers.ModelSerializer):
    productId = serializers.IntegerField(source='product_id', allow_null=True)
    name = serializers.CharField(source='product_name')
    price = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2, coerce_to_string=False)

    class Meta:
        model = OrderItem
        fields = ['productId', 'name', 'quantity', 'price']


class OrderSummarySerializer(serializers.ModelSerializer):
    orderNumber = serializers.CharField(source='order_number')
    totalAmount = serializers.DecimalField(source='total_amount', max_digits=12, decimal_places=2, coerce_to_string=False)
    paymentStatus = serializers.CharField(source='payment_status')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = Order
        fields = ['id', 'orderNumber', 'totalAmount', 'status', 'paymentStatus', 'createdAt']


class OrderListSerializer(OrderSummarySerializer):
    paymentMethod = serializers.CharField(source='payment_method')
    itemCount = serializers.IntegerField(source='item_count')

    class Meta(OrderSummarySerializer.Meta):
        fields = OrderSummarySerializer.Meta.fields + ['paymentMethod', 'itemCount']


class AdminOrderListSerializer(OrderListSerializer):
    customerName = serializers.SerializerMethodField()
    customerEmail = serializers.EmailField(source='user.email')

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ['customerName', 'customerEmail']

    def get_customerName(self, order):
        return order.user.get_full_name() or order.user.get_username()


class OrderDetailSerializer(OrderSummarySerializer):
    paymentMethod = serializers.CharField(source='payment_method')
    updatedAt = serializers.DateTimeField(source='updated_at')
    shippingAddress = AddressSnapshotSerializer(source='shipping_address')
    billingAddress = AddressSnapshotSerializer(source='billing_address')
    items = OrderItemSerializer(many=True)

    class Meta(OrderSummarySerializer.Meta):
        fields = OrderSummarySerializer.Meta.fields + [
            'paymentMethod', 'notes', 'updatedAt', 'shippingAddress', 'billingAddress', 'items',
        ]

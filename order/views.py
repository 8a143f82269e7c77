import logging

from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import lifecycle
from .dashboard import DashboardAggregator
from .serializers import (
    AdminOrderListSerializer,
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderListSerializer,
    OrderStatusSerializer,
    OrderSummarySerializer,
    OrderUpdateSerializer,
)
from .services import OrderService, list_all_orders

logger = logging.getLogger('django')


def _page_params(request, default_limit):
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
        limit = min(max(int(request.query_params.get('limit', default_limit)), 1), 100)
    except ValueError:
        page, limit = 1, default_limit
    return page, limit


class OrderCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        """
        下单接口
        请求体格式: {"shippingAddress": {...}, "billingAddress": {...}, "paymentMethod": "cash_on_delivery",
                    "notes": "", "items": [{"productId": 1, "quantity": 2}]}
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order_service = OrderService(user=request.user)
        order = order_service.create_order(
            shipping_address=data['shipping_address'],
            payment_method=data['payment_method'],
            items=data['items'],
            billing_address=data.get('billing_address'),
            notes=data.get('notes'),
        )

        return Response({
            "success": True,
            "message": "Order created successfully",
            "order": OrderSummarySerializer(order).data,
        }, status=status.HTTP_201_CREATED)


class MyOrdersAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        orders = OrderService(user=request.user).list_orders()
        return Response({"success": True, "orders": OrderListSerializer(orders, many=True).data})


class OrderDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk, *args, **kwargs):
        order = OrderService(user=request.user).get_order(pk)
        return Response({"success": True, "order": OrderDetailSerializer(order).data})

    def put(self, request, pk, *args, **kwargs):
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService(user=request.user).update(
            pk,
            shipping_address=data.get('shipping_address'),
            notes=data.get('notes'),
        )
        return Response({
            "success": True,
            "message": "Order updated successfully",
            "order": OrderDetailSerializer(order).data,
        })

    def delete(self, request, pk, *args, **kwargs):
        OrderService(user=request.user).delete(pk)
        return Response({"success": True, "message": "Order deleted successfully"})


class OrderCancelAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, pk, *args, **kwargs):
        order = OrderService(user=request.user).cancel(pk)
        return Response({
            "success": True,
            "message": "Order cancelled successfully",
            "order": OrderSummarySerializer(order).data,
        })


class AdminOrderListAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, *args, **kwargs):
        page, limit = _page_params(request, default_limit=20)
        orders = list_all_orders(
            status=request.query_params.get('status'),
            payment_status=request.query_params.get('paymentStatus'),
            page=page,
            limit=limit,
        )
        return Response({"success": True, "orders": AdminOrderListSerializer(orders, many=True).data})


class AdminOrderStatusAPIView(APIView):
    permission_classes = [IsAdminUser]

    def put(self, request, pk, *args, **kwargs):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = lifecycle.update_status(pk, data['status'], data.get('payment_status'))
        logger.info(f"admin {request.user.pk} updated order {order.order_number}")
        return Response({
            "success": True,
            "message": "Order status updated successfully",
            "order": {
                "orderNumber": order.order_number,
                "status": order.status,
                "paymentStatus": order.payment_status,
            },
        })


class DashboardStatsAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, *args, **kwargs):
        return Response({"success": True, "stats": DashboardAggregator().stats()})

from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import BulkStockUpdateSerializer, InventoryLogSerializer, StockAdjustmentSerializer
from .services import InventoryLedger, bulk_adjust_stock


class BulkStockUpdateAPIView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request, *args, **kwargs):
        """
        批量修改库存
        请求体格式: {"updates": [{"productId": 1, "newStock": 10, "reason": "restock"}]}
        """
        serializer = BulkStockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updates = [
            (u['product_id'], u['new_stock'], u.get('reason'))
            for u in serializer.validated_data['updates']
        ]

        adjustments = bulk_adjust_stock(updates, actor=request.user)

        return Response({
            "success": True,
            "message": f"Successfully updated stock for {len(adjustments)} products",
            "updatedProducts": StockAdjustmentSerializer(adjustments, many=True).data,
        })


class InventoryLogListAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, *args, **kwargs):
        try:
            page = max(int(request.query_params.get('page', 1)), 1)
            limit = min(max(int(request.query_params.get('limit', 50)), 1), 200)
            product_id = request.query_params.get('productId')
            product_id = int(product_id) if product_id else None
        except ValueError:
            return Response({"success": False, "error": "Invalid query parameters"}, status=status.HTTP_400_BAD_REQUEST)

        logs = InventoryLedger().query(product_id=product_id, page=page, limit=limit)
        return Response({"success": True, "logs": InventoryLogSerializer(logs, many=True).data})

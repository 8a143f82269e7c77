from django.urls import path

from .views import BulkStockUpdateAPIView, InventoryLogListAPIView

urlpatterns = [
    path('bulk-update', BulkStockUpdateAPIView.as_view(), name='inventory-bulk-update'),
    path('logs', InventoryLogListAPIView.as_view(), name='inventory-logs'),
]

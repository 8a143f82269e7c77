from django.urls import include, path

from order.views import DashboardStatsAPIView

urlpatterns = [
    path('api/orders/', include('order.urls')),
    path('api/admin/inventory/', include('inventory.urls')),
    path('api/admin/dashboard/stats', DashboardStatsAPIView.as_view(), name='dashboard-stats'),
]

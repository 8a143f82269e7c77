from django.urls import path

from . import views

urlpatterns = [
    path('', views.OrderCreateAPIView.as_view(), name='order-create'),
    path('my-orders', views.MyOrdersAPIView.as_view(), name='order-my-orders'),
    path('<int:pk>', views.OrderDetailAPIView.as_view(), name='order-detail'),
    path('<int:pk>/cancel', views.OrderCancelAPIView.as_view(), name='order-cancel'),
    path('admin/all', views.AdminOrderListAPIView.as_view(), name='order-admin-list'),
    path('admin/<int:pk>/status', views.AdminOrderStatusAPIView.as_view(), name='order-admin-status'),
]

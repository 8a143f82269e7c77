"""后台统计 (只读)"""
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone

from inventory.models import Product
from .cache_manager import CacheManager
from .models import Order, OrderItem


def _money(value):
    return float(value or 0)


class DashboardAggregator:
    def __init__(self, cache=None):
        self.cache = cache or CacheManager()

    def stats(self):
        year = timezone.now().year
        params = {'year': year, 'low_stock_threshold': settings.LOW_STOCK_THRESHOLD}
        cached = self.cache.get_json('dashboard', params)
        if cached is not None:
            return cached

        stats = self.compute(year)
        self.cache.set_json('dashboard', params, stats, ttl=settings.DASHBOARD_CACHE_TTL)
        return stats

    def compute(self, year):
        active_orders = Order.objects.exclude(status=Order.Status.CANCELLED)

        overview = {
            'totalProducts': Product.objects.filter(is_active=True).count(),
            'totalOrders': Order.objects.count(),
            'totalUsers': get_user_model().objects.filter(is_staff=False).count(),
            'totalRevenue': _money(active_orders.aggregate(total=Sum('total_amount'))['total']),
            'pendingOrders': Order.objects.filter(status=Order.Status.PENDING).count(),
        }

        low_stock = (
            Product.objects.filter(is_active=True, stock_quantity__lt=settings.LOW_STOCK_THRESHOLD)
            .order_by('stock_quantity', 'id')
            .values('id', 'name', 'stock_quantity')[:10]
        )

        recent_orders = Order.objects.select_related('user').order_by('-created_at', '-id')[:10]

        top_products = (
            OrderItem.objects.filter(product__isnull=False)
            .values('product_id', 'product__name')
            .annotate(total_sold=Sum('quantity'))
            .order_by('-total_sold', 'product_id')[:5]
        )

        monthly_revenue = (
            active_orders.filter(created_at__year=year)
            .annotate(month=ExtractMonth('created_at'))
            .values('month')
            .annotate(revenue=Sum('total_amount'))
            .order_by('month')
        )

        return {
            'overview': overview,
            'lowStockProducts': [
                {'id': p['id'], 'name': p['name'], 'stockQuantity': p['stock_quantity']}
                for p in low_stock
            ],
            'recentOrders': [
                {
                    'id': o.pk,
                    'orderNumber': o.order_number,
                    'totalAmount': _money(o.total_amount),
                    'status': o.status,
                    'createdAt': o.created_at.isoformat(),
                    'customerName': o.user.get_full_name() or o.user.get_username(),
                }
                for o in recent_orders
            ],
            'topProducts': [
                {'id': p['product_id'], 'name': p['product__name'], 'totalSold': p['total_sold']}
                for p in top_products
            ],
            'monthlyRevenue': [
                {'month': m['month'], 'revenue': _money(m['revenue'])}
                for m in monthly_revenue
            ],
        }

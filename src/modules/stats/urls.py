from django.urls import path

from modules.stats.views import OrderStatsView, WarehouseStatsView

urlpatterns = [
    path("orders/stats/", OrderStatsView.as_view(), name="order-stats"),
    path("warehouses/stats/", WarehouseStatsView.as_view(), name="warehouse-stats"),
]

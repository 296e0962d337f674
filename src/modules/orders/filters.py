import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name="status")
    customer = django_filters.NumberFilter(field_name="customer_id")
    from_date = django_filters.DateFilter(field_name="created_at__date", lookup_expr="gte")
    to_date = django_filters.DateFilter(field_name="created_at__date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "customer", "from_date", "to_date"]

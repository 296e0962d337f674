import django_filters

from modules.customers.models import Customer


class CustomerFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    lookup_code = django_filters.CharFilter(field_name="lookup_code", lookup_expr="iexact")
    status = django_filters.NumberFilter(field_name="status")

    class Meta:
        model = Customer
        fields = ["name", "lookup_code", "status"]

# products/filters.py

from datetime import timedelta

import django_filters
from django.utils import timezone

from products.models import StockBatch


class StockBatchFilter(django_filters.FilterSet):
    """
    - product=<uuid>
    - in_stock=true          only batches with quantity > 0
    - expiring_within=<days> expiry within N days from today
    """

    product = django_filters.UUIDFilter(field_name="product_id")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")
    expiring_within = django_filters.NumberFilter(method="filter_expiring_within", min_value=0)

    class Meta:
        model = StockBatch
        fields = ["product", "in_stock", "expiring_within"]

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__gt=0)
        return queryset

    def filter_expiring_within(self, queryset, name, value):
        cutoff = timezone.localdate() + timedelta(days=int(value))
        return queryset.filter(expiry_date__lte=cutoff)

# products/views/product.py

"""
PRODUCT VIEWSET (READ)

Purpose:
- Product lookup for the POS screen (search by barcode / name / salt formula)
- FEFO batch availability per product (what sale settlement will draw from)

Catalog editing is owned by a separate catalog tool and is not exposed here.
"""

from django.db.models import Sum
from django.db.models.functions import Coalesce
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers import AvailableBatchSerializer, ProductSerializer
from products.services.batches import available_batches_for_product
from products.services.search import search_products


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Product.objects.annotate(
            stock_total=Coalesce(Sum("stock_batches__quantity"), 0)
        ).order_by("name")

        params = self.request.query_params

        active = (params.get("active") or "").strip().lower()
        if active in {"1", "true", "yes"}:
            qs = qs.filter(is_active=True)

        return search_products(params.get("search") or params.get("q"), queryset=qs)

    @extend_schema(
        parameters=[
            OpenApiParameter("search", str, description="Barcode digits or name / salt text"),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(responses={200: AvailableBatchSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="batches")
    def batches(self, request, pk=None):
        """
        Batches with stock, earliest expiry first.
        """
        product = self.get_object()
        batches = available_batches_for_product(product.id)
        return Response(AvailableBatchSerializer(batches, many=True).data)

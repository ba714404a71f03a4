# products/urls.py

"""
PRODUCTS URLS

Mounted under /api/products/:
- products/                  list + search
- products/<id>/batches/     FEFO batch availability
- stock-batches/             batch ledger (read)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet, StockBatchViewSet

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"stock-batches", StockBatchViewSet, basename="stock-batches")

urlpatterns = [
    path("", include(router.urls)),
]

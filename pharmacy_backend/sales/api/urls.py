# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Rules:
- Explicit non-PK routes (like "checkout") MUST be registered BEFORE router URLs,
  otherwise the router will treat "checkout" as a <pk> and you'll get 405.

Provides:
- Staff checkout:
    POST /api/sales/checkout/

- Staff endpoints:
    GET  /api/sales/sales/                          (history, date_from / date_to)
    GET  /api/sales/sales/<uuid>/                   (one sale)
    GET  /api/sales/sales/summary/                  (statistics, net of returns)
    GET  /api/sales/sales/by-receipt/<receipt>/     (receipt lookup, 404 if unknown)
    POST /api/sales/sales/<uuid>/returns/           (validated return)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets.sale import SaleViewSet
from sales.views.checkout import CheckoutSaleView

router = DefaultRouter()
router.register(r"sales", SaleViewSet, basename="sales")

urlpatterns = [
    path("checkout/", CheckoutSaleView.as_view(), name="sales-checkout"),
    path("", include(router.urls)),
]

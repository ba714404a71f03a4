# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history: list + retrieve with date filters.
- Receipt lookup by receipt number (return screen entry point).
- Sales summary (revenue / transactions / items / profit, net of returns).
- Returns against a sale (window + ceiling enforced here, then settled).

Security:
- Requires IsAuthenticated

Return rules:
- Only inside the return window (PHARMACY_POS["RETURN_WINDOW_DAYS"]).
- Per line, never more than sold minus already returned.
- The sale row is locked for the duration so two tills cannot both pass
  the ceiling check for the same line.
======================================================
"""

from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales.models import Sale, SalesReturn
from sales.serializers import ReturnInputSerializer, SalesReturnSerializer, SaleSerializer
from sales.services.exceptions import InvalidReturnRequestError
from sales.services.ledger import SalesLedger, recent_sales_queryset
from sales.services.return_policy import validate_return_request
from sales.services.summary import filter_sales_by_date, summarize_sales
from sales.views.checkout import SETTLEMENT_ERROR_STATUS, identity_for


def _date_param(params, name):
    raw = (params.get(name) or "").strip()
    if not raw:
        return None
    try:
        return parse_date(raw)
    except ValueError:
        return None


class SalesSummarySerializer(serializers.Serializer):
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_transactions = serializers.IntegerField()
    avg_transaction = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_items = serializers.IntegerField()
    total_profit = serializers.DecimalField(max_digits=14, decimal_places=2)


DATE_PARAMETERS = [
    OpenApiParameter("date_from", str, description="YYYY-MM-DD, inclusive"),
    OpenApiParameter("date_to", str, description="YYYY-MM-DD, inclusive"),
]


class SaleViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_ledger(self) -> SalesLedger:
        return SalesLedger(identity=identity_for(self.request))

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        qs = recent_sales_queryset()

        params = self.request.query_params

        pm = (params.get("payment_method") or "").strip().lower()
        if pm:
            qs = qs.filter(payment_method__iexact=pm)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(receipt_number__icontains=q)

        d1 = _date_param(params, "date_from")
        if d1:
            qs = qs.filter(created_at__date__gte=d1)

        d2 = _date_param(params, "date_to")
        if d2:
            qs = qs.filter(created_at__date__lte=d2)

        return qs

    @extend_schema(parameters=DATE_PARAMETERS)
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # ======================================================
    # SUMMARY
    # GET /api/sales/sales/summary/
    # ======================================================

    @extend_schema(parameters=DATE_PARAMETERS, responses={200: SalesSummarySerializer})
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        params = request.query_params
        sales = filter_sales_by_date(
            self.get_ledger().sales,
            _date_param(params, "date_from"),
            _date_param(params, "date_to"),
        )
        data = summarize_sales(sales).as_dict()
        return Response(SalesSummarySerializer(data).data, status=status.HTTP_200_OK)

    # ======================================================
    # RECEIPT LOOKUP
    # GET /api/sales/sales/by-receipt/<receipt_number>/
    # ======================================================

    @extend_schema(responses={200: SaleSerializer})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-receipt/(?P<receipt_number>[^/]+)",
    )
    def by_receipt(self, request, receipt_number=None):
        sale = self.get_ledger().get_sale_by_receipt(receipt_number)
        if sale is None:
            return Response({"detail": "Receipt not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)

    # ======================================================
    # RETURNS (PARTIAL, APPEND-ONLY)
    # POST /api/sales/sales/<id>/returns/
    # ======================================================

    @extend_schema(
        request=ReturnInputSerializer,
        responses={201: SalesReturnSerializer},
    )
    @action(detail=True, methods=["post"], url_path="returns")
    def returns(self, request, pk=None):
        ser = ReturnInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        items = ser.validated_data["items"]
        reason = ser.validated_data["reason"].strip()

        with transaction.atomic():
            sale = get_object_or_404(
                Sale.objects.select_for_update().prefetch_related("items"),
                pk=pk,
            )

            try:
                validated = validate_return_request(sale, items, reason=reason)
            except InvalidReturnRequestError as exc:
                return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

            result = self.get_ledger().process_return(sale.id, validated, reason)

        if not result.success:
            return Response(
                {"detail": result.error},
                status=SETTLEMENT_ERROR_STATUS.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
            )

        sales_return = SalesReturn.objects.prefetch_related("return_items").get(
            pk=result.sales_return.pk
        )
        return Response(SalesReturnSerializer(sales_return).data, status=status.HTTP_201_CREATED)

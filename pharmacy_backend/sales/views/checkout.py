# sales/views/checkout.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from sales.serializers import CheckoutInputSerializer, SaleSerializer
from sales.services.ledger import SalesLedger, recent_sales_queryset

# error_kind -> HTTP status for rejected settlements
SETTLEMENT_ERROR_STATUS = {
    "PersistenceFailure": status.HTTP_503_SERVICE_UNAVAILABLE,
    "InsufficientStockError": status.HTTP_409_CONFLICT,
    "InvalidCartItemError": status.HTTP_400_BAD_REQUEST,
    "ValueError": status.HTTP_400_BAD_REQUEST,
}


def identity_for(request):
    """Zero-arg identity provider bound to the authenticated user."""

    def identity():
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return str(user.pk)

    return identity


class CheckoutSaleView(APIView):
    """
    POS CHECKOUT ENDPOINT (AUTHORITATIVE)

    GUARANTEES:
    - Atomic settlement (sale, items and stock deductions commit together)
    - FEFO stock deduction, recorded per line as a deduction ledger
    - Line totals are taken from the request as sent

    Responses:
    - 201 sale payload
    - 400 malformed cart / invalid line
    - 409 insufficient stock
    - 503 the database rejected the write
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: SaleSerializer},
    )
    def post(self, request):
        ser = CheckoutInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        ledger = SalesLedger(identity=identity_for(request))
        result = ledger.process_sale(
            items=ser.validated_data["items"],
            payment_method=ser.validated_data["payment_method"],
            discount=ser.validated_data["discount"],
        )

        if not result.success:
            return Response(
                {"detail": result.error},
                status=SETTLEMENT_ERROR_STATUS.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
            )

        sale = recent_sales_queryset().get(pk=result.sale.pk)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from products.models import Product, StockBatch


def make_product(name="Panadol 500mg", **extra):
    return Product.objects.create(name=name, **extra)


def make_batch(product, number, quantity, expires_in_days, cost="4.00", price="6.00"):
    return StockBatch.objects.create(
        product=product,
        batch_number=number,
        quantity=quantity,
        cost_price=Decimal(cost),
        selling_price=Decimal(price),
        expiry_date=timezone.localdate() + timedelta(days=expires_in_days),
    )


def cart_line(product, quantity, unit_price="6.00", total=None):
    unit_price = Decimal(unit_price)
    return {
        "product_id": str(product.id),
        "product_name": product.name,
        "quantity": quantity,
        "unit_price": unit_price,
        "total": Decimal(total) if total is not None else unit_price * quantity,
    }

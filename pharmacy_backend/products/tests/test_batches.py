from datetime import timedelta
from decimal import Decimal
import uuid

from django.test import TestCase
from django.utils import timezone

from products.models import Product, StockBatch
from products.services.batches import (
    apply_quantity_deltas,
    available_batches_for_product,
    fetch_batch_quantities,
)
from products.services.fefo import InsufficientStockError


def make_batch(product, number, quantity, expires_in_days):
    return StockBatch.objects.create(
        product=product,
        batch_number=number,
        quantity=quantity,
        cost_price=Decimal("4.00"),
        selling_price=Decimal("6.50"),
        expiry_date=timezone.localdate() + timedelta(days=expires_in_days),
    )


class AvailableBatchesTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Amoxil 500mg")
        self.late = make_batch(self.product, "LATE", 10, 300)
        self.early = make_batch(self.product, "EARLY", 3, 30)
        self.empty = make_batch(self.product, "EMPTY", 0, 10)

    def test_earliest_expiry_first_and_empty_excluded(self):
        batches = available_batches_for_product(self.product.id)

        self.assertEqual([b.batch_number for b in batches], ["EARLY", "LATE"])
        self.assertEqual(batches[0].id, str(self.early.id))
        self.assertEqual(batches[0].expiry_date, self.early.expiry_date.isoformat())

    def test_other_products_are_not_included(self):
        other = Product.objects.create(name="Flagyl")
        make_batch(other, "OTHER", 5, 5)

        numbers = [b.batch_number for b in available_batches_for_product(self.product.id)]

        self.assertNotIn("OTHER", numbers)


class ApplyQuantityDeltasTests(TestCase):
    """
    GUARANTEES:
    - Deltas for the same batch are summed before the single write
    - Quantity never goes negative
    - Unknown batches are skipped, the rest are still written
    """

    def setUp(self):
        self.product = Product.objects.create(name="Flagyl 400mg")
        self.b1 = make_batch(self.product, "B1", 3, 30)
        self.b2 = make_batch(self.product, "B2", 10, 90)

    def test_negative_and_positive_deltas(self):
        result = apply_quantity_deltas({str(self.b1.id): -3, str(self.b2.id): 4})

        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual(self.b1.quantity, 0)
        self.assertEqual(self.b2.quantity, 14)
        self.assertEqual(result, {str(self.b1.id): 0, str(self.b2.id): 14})

    def test_refuses_to_go_negative(self):
        with self.assertRaises(InsufficientStockError):
            apply_quantity_deltas({str(self.b1.id): -4})

        self.b1.refresh_from_db()
        self.assertEqual(self.b1.quantity, 3)

    def test_unknown_batch_is_skipped(self):
        missing = str(uuid.uuid4())

        with self.assertLogs("products.services.batches", level="WARNING"):
            result = apply_quantity_deltas({missing: 2, str(self.b2.id): 1})

        self.assertEqual(result, {str(self.b2.id): 11})

    def test_zero_deltas_write_nothing(self):
        self.assertEqual(apply_quantity_deltas({str(self.b1.id): 0}), {})

    def test_fetch_batch_quantities(self):
        self.assertEqual(
            fetch_batch_quantities([self.b1.id, self.b2.id, None]),
            {str(self.b1.id): 3, str(self.b2.id): 10},
        )

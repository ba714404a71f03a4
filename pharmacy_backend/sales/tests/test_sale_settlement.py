from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from products.models import StockBatch
from products.services.fefo import AvailableBatch, InsufficientStockError
from sales.models import CartItem, Sale, SaleItem
from sales.services.exceptions import InvalidCartItemError, PersistenceFailure
from sales.services.sale_settlement import settle_sale

from .helpers import cart_line, make_batch, make_product


class SettleSaleTests(TestCase):
    """
    GUARANTEES:
    - FEFO deduction across batches, recorded as an ordered ledger per line
    - Nothing is written when any line cannot be allocated
    - Sale total is the sum of the caller's line totals
    """

    def setUp(self):
        self.product = make_product("Panadol 500mg")
        self.b1 = make_batch(self.product, "B1", 3, 30)
        self.b2 = make_batch(self.product, "B2", 10, 180)

    def test_sale_spanning_two_batches(self):
        sale = settle_sale(items=[cart_line(self.product, 5)], payment_method="cash", cashier_id="7")

        item = sale.items.get()
        self.assertEqual(
            [(d.batch_id, d.quantity) for d in item.deductions],
            [(str(self.b1.id), 3), (str(self.b2.id), 2)],
        )

        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual(self.b1.quantity, 0)
        self.assertEqual(self.b2.quantity, 8)

        self.assertEqual(sale.receipt_number, "ZZ-00001")
        self.assertEqual(sale.cashier_id, "7")
        self.assertEqual(sale.total, Decimal("30.00"))

    def test_ledger_records_batch_number_and_expiry(self):
        sale = settle_sale(items=[cart_line(self.product, 1)], payment_method="cash")

        entry = sale.items.get().batch_deductions[0]
        self.assertEqual(entry["batch_number"], "B1")
        self.assertEqual(entry["expiry_date"], self.b1.expiry_date.isoformat())

    def test_total_trusts_caller_line_totals(self):
        sale = settle_sale(
            items=[cart_line(self.product, 2, unit_price="6.00", total="10.00")],
            payment_method="card",
        )

        self.assertEqual(sale.total, Decimal("10.00"))

    def test_repeated_product_lines_share_batch_stock(self):
        sale = settle_sale(
            items=[cart_line(self.product, 2), cart_line(self.product, 2)],
            payment_method="cash",
        )

        first, second = sale.items.order_by("position")
        self.assertEqual([(d.batch_number, d.quantity) for d in first.deductions], [("B1", 2)])
        self.assertEqual(
            [(d.batch_number, d.quantity) for d in second.deductions],
            [("B1", 1), ("B2", 1)],
        )

        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual(self.b1.quantity, 0)
        self.assertEqual(self.b2.quantity, 9)

    def test_insufficient_stock_writes_nothing(self):
        other = make_product("Brufen 400mg")
        make_batch(other, "X1", 1, 30)

        with self.assertRaises(InsufficientStockError) as ctx:
            settle_sale(
                items=[cart_line(self.product, 2), cart_line(other, 5)],
                payment_method="cash",
            )

        self.assertIn("Available: 1", str(ctx.exception))
        self.assertFalse(Sale.objects.exists())
        self.b1.refresh_from_db()
        self.assertEqual(self.b1.quantity, 3)

    def test_line_without_product_identity_is_rejected(self):
        line = cart_line(self.product, 1)
        line["product_name"] = ""

        with self.assertRaises(InvalidCartItemError):
            settle_sale(items=[line], payment_method="cash")

        self.assertFalse(Sale.objects.exists())

    def test_injected_batch_source(self):
        calls = []

        def batches(product_id):
            calls.append(product_id)
            return [AvailableBatch(str(self.b2.id), "B2", 10, "2027-01-01")]

        settle_sale(
            items=[CartItem.from_dict(cart_line(self.product, 4))],
            payment_method="cash",
            get_available_batches=batches,
        )

        self.assertEqual(calls, [str(self.product.id)])
        self.b2.refresh_from_db()
        self.assertEqual(self.b2.quantity, 6)

    def test_write_failure_rolls_back(self):
        with mock.patch(
            "sales.services.sale_settlement.apply_quantity_deltas",
            side_effect=DatabaseError("disk full"),
        ):
            with self.assertLogs("sales.services.sale_settlement", level="ERROR"):
                with self.assertRaises(PersistenceFailure):
                    settle_sale(items=[cart_line(self.product, 1)], payment_method="cash")

        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SaleItem.objects.exists())
        self.assertEqual(StockBatch.objects.get(pk=self.b1.pk).quantity, 3)

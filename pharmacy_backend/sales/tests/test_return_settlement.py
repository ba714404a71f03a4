from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from products.services.fefo import BatchDeduction
from sales.models import ReturnItem, Sale, SaleItem
from sales.services.exceptions import InvalidReturnRequestError
from sales.services.return_settlement import (
    ReturnRequestItem,
    plan_return_items,
    settle_return,
)
from sales.services.sale_settlement import settle_sale

from .helpers import cart_line, make_batch, make_product


def _request(quantity, ledger=(), sale_item_id="si-1", product_id="p-1"):
    return ReturnRequestItem(
        sale_item_id=sale_item_id,
        product_id=product_id,
        quantity=quantity,
        batch_deductions=tuple(ledger),
    )


class PlanReturnItemsTests(SimpleTestCase):
    ledger = (
        BatchDeduction("b1", "B1", 3, "2026-01-31"),
        BatchDeduction("b2", "B2", 2, "2026-06-30"),
    )

    def test_walks_ledger_in_original_order(self):
        lines = plan_return_items([_request(4, self.ledger)])

        self.assertEqual([(line.batch_id, line.quantity) for line in lines], [("b1", 3), ("b2", 1)])

    def test_partial_return_stays_on_first_batch(self):
        lines = plan_return_items([_request(2, self.ledger)])

        self.assertEqual([(line.batch_id, line.quantity) for line in lines], [("b1", 2)])

    def test_no_ledger_restores_without_batch(self):
        lines = plan_return_items([_request(3)])

        self.assertEqual(len(lines), 1)
        self.assertIsNone(lines[0].batch_id)
        self.assertEqual(lines[0].quantity, 3)


class ReturnRequestItemTests(SimpleTestCase):
    def test_from_dict_parses_ledger(self):
        item = ReturnRequestItem.from_dict(
            {
                "sale_item_id": "si-1",
                "product_id": "p-1",
                "quantity": 2,
                "batch_deductions": [{"batch_id": "b1", "batch_number": "B1", "quantity": 2, "expiry_date": ""}],
            }
        )

        self.assertEqual(item.batch_deductions, (BatchDeduction("b1", "B1", 2, ""),))

    def test_from_dict_rejects_bad_shapes(self):
        for raw in (
            {"product_id": "p-1", "quantity": 1},
            {"sale_item_id": "si-1", "product_id": "p-1", "quantity": 0},
            {"sale_item_id": "si-1", "product_id": "p-1", "quantity": "2"},
            "not-a-mapping",
        ):
            with self.assertRaises(InvalidReturnRequestError):
                ReturnRequestItem.from_dict(raw)


class SettleReturnTests(TestCase):
    """
    GUARANTEES:
    - Round trip: sell q, return q, the batch is back to its starting stock
    - Restoration follows the sale's deduction ledger
    - Legacy lines (no ledger) are recorded with batch = NULL, stock untouched
    """

    def setUp(self):
        self.product = make_product("Augmentin 625mg")
        self.b1 = make_batch(self.product, "B1", 3, 30)
        self.b2 = make_batch(self.product, "B2", 10, 180)

    def _return_item(self, sale_item, quantity):
        return {
            "sale_item_id": str(sale_item.id),
            "product_id": str(sale_item.product_id),
            "quantity": quantity,
            "batch_deductions": sale_item.batch_deductions,
        }

    def test_round_trip_single_batch(self):
        sale = settle_sale(items=[cart_line(self.product, 2)], payment_method="cash")
        self.b1.refresh_from_db()
        self.assertEqual(self.b1.quantity, 1)

        settle_return(
            sale_id=sale.id,
            items=[self._return_item(sale.items.get(), 2)],
            reason="Wrong strength",
            returned_by="7",
        )

        self.b1.refresh_from_db()
        self.assertEqual(self.b1.quantity, 3)

    def test_restores_each_batch_it_drew_from(self):
        sale = settle_sale(items=[cart_line(self.product, 5)], payment_method="cash")

        sales_return = settle_return(
            sale_id=sale.id,
            items=[self._return_item(sale.items.get(), 5)],
            reason="Customer changed mind",
        )

        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual((self.b1.quantity, self.b2.quantity), (3, 10))
        self.assertEqual(sales_return.return_items.count(), 2)
        self.assertTrue(sales_return.receipt_number.startswith("RET-"))
        self.assertEqual(sales_return.return_reason, "Customer changed mind")

    def test_legacy_line_without_ledger(self):
        sale = Sale.objects.create(receipt_number="ZZ-00099", total=Decimal("12.00"))
        legacy = SaleItem.objects.create(
            sale=sale,
            product=self.product,
            product_name=self.product.name,
            quantity=2,
            unit_price=Decimal("6.00"),
            total=Decimal("12.00"),
            batch_deductions=None,
        )

        settle_return(sale_id=sale.id, items=[self._return_item(legacy, 2)], reason="Damaged box")

        returned = ReturnItem.objects.get()
        self.assertIsNone(returned.batch_id)
        self.assertEqual(returned.quantity, 2)
        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual((self.b1.quantity, self.b2.quantity), (3, 10))

    def test_rejects_empty_request(self):
        with self.assertRaises(InvalidReturnRequestError):
            settle_return(sale_id=None, items=[{"sale_item_id": "x"}], reason="r")

        with self.assertRaises(InvalidReturnRequestError):
            settle_return(sale_id="abc", items=[], reason="r")

    def test_deleted_batch_is_restored_without_batch(self):
        sale = settle_sale(items=[cart_line(self.product, 5)], payment_method="cash")
        item = sale.items.get()
        self.b1.delete()

        with self.assertLogs("sales.services.return_settlement", level="WARNING"):
            sales_return = settle_return(
                sale_id=sale.id,
                items=[self._return_item(item, 5)],
                reason="Recalled lot",
            )

        lines = sorted(
            (line.batch_id is None, line.quantity) for line in sales_return.return_items.all()
        )
        self.assertEqual(lines, [(False, 2), (True, 3)])
        self.b2.refresh_from_db()
        self.assertEqual(self.b2.quantity, 10)

from django.test import SimpleTestCase

from products.services.fefo import (
    AvailableBatch,
    BatchDeduction,
    InsufficientStockError,
    allocate_fefo,
)


def _batch(batch_id, qty, expiry, number=None):
    return AvailableBatch(
        id=batch_id,
        batch_number=number or f"LOT-{batch_id}",
        quantity=qty,
        expiry_date=expiry,
    )


class AllocateFefoTests(SimpleTestCase):
    """
    GUARANTEES:
    - Earliest-expiring batch is consumed first
    - Deductions sum exactly to the requested quantity
    - Shortfall raises before any plan is returned
    """

    def test_spans_batches_in_given_order(self):
        batches = [
            _batch("b1", 3, "2026-01-31"),
            _batch("b2", 10, "2026-06-30"),
        ]

        plan = allocate_fefo(quantity=5, batches=batches, product_name="Panadol")

        self.assertEqual(
            plan,
            [
                BatchDeduction(batch_id="b1", batch_number="LOT-b1", quantity=3, expiry_date="2026-01-31"),
                BatchDeduction(batch_id="b2", batch_number="LOT-b2", quantity=2, expiry_date="2026-06-30"),
            ],
        )

    def test_single_batch_covers_request(self):
        plan = allocate_fefo(quantity=2, batches=[_batch("b1", 3, "2026-01-31"), _batch("b2", 10, "2026-06-30")])

        self.assertEqual(len(plan), 1)
        self.assertEqual(plan[0].batch_id, "b1")
        self.assertEqual(plan[0].quantity, 2)

    def test_exact_total_consumes_everything(self):
        plan = allocate_fefo(quantity=13, batches=[_batch("b1", 3, "2026-01-31"), _batch("b2", 10, "2026-06-30")])

        self.assertEqual(sum(d.quantity for d in plan), 13)
        self.assertEqual([d.quantity for d in plan], [3, 10])

    def test_shortfall_raises_with_available_total(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            allocate_fefo(
                quantity=20,
                batches=[_batch("b1", 3, "2026-01-31"), _batch("b2", 10, "2026-06-30")],
                product_name="Panadol",
            )

        self.assertEqual(ctx.exception.available, 13)
        self.assertEqual(str(ctx.exception), "Insufficient stock for Panadol. Available: 13")

    def test_no_batches_is_a_shortfall(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            allocate_fefo(quantity=1, batches=[], product_name="Brufen")

        self.assertEqual(ctx.exception.available, 0)

    def test_empty_batches_are_skipped(self):
        plan = allocate_fefo(
            quantity=2,
            batches=[_batch("b0", 0, "2025-12-31"), _batch("b1", 5, "2026-01-31")],
        )

        self.assertEqual([d.batch_id for d in plan], ["b1"])

    def test_dirty_rows_degrade_to_zero(self):
        batches = [
            {"id": "b1", "quantity": None},
            {"id": "b2", "quantity": 4, "batch_number": "L2", "expiry_date": "2026-03-01"},
        ]

        plan = allocate_fefo(quantity=4, batches=batches)

        self.assertEqual(plan, [BatchDeduction("b2", "L2", 4, "2026-03-01")])

    def test_rejects_non_positive_quantity(self):
        for bad in (0, -1, 1.5, True):
            with self.assertRaises(ValueError):
                allocate_fefo(quantity=bad, batches=[_batch("b1", 3, "2026-01-31")])


class BatchDeductionTests(SimpleTestCase):
    def test_from_dict_tolerates_missing_fields(self):
        d = BatchDeduction.from_dict({"batch_id": "b1", "quantity": "3"})

        self.assertEqual(d, BatchDeduction("b1", "", 3, ""))

    def test_as_dict_shape(self):
        d = BatchDeduction("b1", "LOT-1", 2, "2026-01-31")

        self.assertEqual(
            d.as_dict(),
            {"batch_id": "b1", "batch_number": "LOT-1", "quantity": 2, "expiry_date": "2026-01-31"},
        )

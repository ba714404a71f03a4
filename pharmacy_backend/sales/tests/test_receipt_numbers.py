from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings

from sales.models import Sale
from sales.services.receipt_numbers import (
    next_sale_receipt_number,
    parse_receipt_sequence,
    return_receipt_number,
)


class ParseReceiptSequenceTests(SimpleTestCase):
    def test_parses_numeric_suffix(self):
        self.assertEqual(parse_receipt_sequence("ZZ-00007", "ZZ"), 7)
        self.assertEqual(parse_receipt_sequence("zz-00012", "ZZ"), 12)

    def test_unparseable_values(self):
        self.assertIsNone(parse_receipt_sequence(None, "ZZ"))
        self.assertIsNone(parse_receipt_sequence("ZZ-ABC", "ZZ"))
        self.assertIsNone(parse_receipt_sequence("ZZ-2026-001", "ZZ"))
        self.assertIsNone(parse_receipt_sequence("XX-00001", "ZZ"))

    def test_hyphenated_prefix(self):
        self.assertEqual(parse_receipt_sequence("KP-POS-00004", "KP-POS"), 4)
        self.assertEqual(parse_receipt_sequence("kp-pos-00010", "KP-POS"), 10)
        self.assertIsNone(parse_receipt_sequence("KP-00004", "KP-POS"))
        self.assertIsNone(parse_receipt_sequence("KP-POS-2026-001", "KP-POS"))


class NextSaleReceiptNumberTests(TestCase):
    def _sale(self, receipt, minutes_ago=0):
        sale = Sale.objects.create(receipt_number=receipt, total=Decimal("1.00"))
        if minutes_ago:
            Sale.objects.filter(pk=sale.pk).update(created_at=sale.created_at - timedelta(minutes=minutes_ago))
        return sale

    def test_first_receipt(self):
        self.assertEqual(next_sale_receipt_number(), "ZZ-00001")

    def test_increments_latest(self):
        self._sale("ZZ-00007")

        self.assertEqual(next_sale_receipt_number(), "ZZ-00008")

    def test_latest_by_creation_time_wins(self):
        self._sale("ZZ-00041", minutes_ago=5)
        self._sale("ZZ-00003")

        self.assertEqual(next_sale_receipt_number(), "ZZ-00004")

    def test_other_prefixes_are_ignored(self):
        self._sale("RX-00099")

        self.assertEqual(next_sale_receipt_number(), "ZZ-00001")

    def test_unparseable_latest_restarts_sequence(self):
        self._sale("ZZ-LEGACY")

        self.assertEqual(next_sale_receipt_number(), "ZZ-00001")

    @override_settings(PHARMACY_POS={"RECEIPT_PREFIX": "PH"})
    def test_prefix_from_settings(self):
        self.assertEqual(next_sale_receipt_number(), "PH-00001")

    @override_settings(PHARMACY_POS={"RECEIPT_PREFIX": "KP-POS"})
    def test_hyphenated_prefix_from_settings_increments(self):
        self._sale("KP-POS-00001", minutes_ago=1)

        self.assertEqual(next_sale_receipt_number(), "KP-POS-00002")

    def test_lookup_failure_falls_back_to_timestamp(self):
        now = datetime(2026, 3, 1, 12, 0, 0, 123000, tzinfo=dt_timezone.utc)
        millis = str(int(now.timestamp() * 1000))

        with mock.patch("sales.services.receipt_numbers.Sale.objects.filter", side_effect=DatabaseError("down")):
            with self.assertLogs("sales.services.receipt_numbers", level="WARNING"):
                receipt = next_sale_receipt_number(now=now)

        self.assertEqual(receipt, f"ZZ-{millis[-5:]}")


class ReturnReceiptNumberTests(SimpleTestCase):
    def test_format(self):
        now = datetime(2026, 3, 1, 12, 0, 0, tzinfo=dt_timezone.utc)
        millis = str(int(now.timestamp() * 1000))

        self.assertEqual(return_receipt_number(now=now), f"RET-20260301-{millis[-6:]}")

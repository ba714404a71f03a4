from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from products.models import Product
from products.services.search import is_numeric, matches_search, search_products


class MatchesSearchTests(SimpleTestCase):
    def setUp(self):
        self.product = SimpleNamespace(
            name="Panadol Extra",
            barcode="5012345678900",
            salt_formula="Paracetamol + Caffeine",
        )

    def test_blank_term_matches_everything(self):
        self.assertTrue(matches_search(self.product, ""))
        self.assertTrue(matches_search(self.product, "   "))
        self.assertTrue(matches_search(self.product, None))

    def test_numeric_term_matches_barcode_only(self):
        self.assertTrue(matches_search(self.product, "50123"))
        self.assertFalse(matches_search(self.product, "999"))

    def test_text_matches_name_or_salt_case_insensitively(self):
        self.assertTrue(matches_search(self.product, "panadol"))
        self.assertTrue(matches_search(self.product, "CAFFEINE"))
        self.assertFalse(matches_search(self.product, "ibuprofen"))

    def test_missing_fields_do_not_match(self):
        bare = SimpleNamespace(name=None, barcode=None, salt_formula=None)

        self.assertFalse(matches_search(bare, "pan"))
        self.assertFalse(matches_search(bare, "123"))
        self.assertFalse(matches_search(None, "pan"))

    def test_is_numeric(self):
        self.assertTrue(is_numeric("0123"))
        self.assertFalse(is_numeric("12a"))
        self.assertFalse(is_numeric(""))


class SearchProductsTests(TestCase):
    def setUp(self):
        self.panadol = Product.objects.create(
            name="Panadol",
            barcode="5012345678900",
            salt_formula="Paracetamol",
        )
        self.brufen = Product.objects.create(
            name="Brufen",
            barcode="6009876543210",
            salt_formula="Ibuprofen",
        )

    def test_text_search_hits_salt_formula(self):
        self.assertEqual(list(search_products("ibupro")), [self.brufen])

    def test_numeric_search_hits_barcode(self):
        self.assertEqual(list(search_products("5012")), [self.panadol])

    def test_blank_search_returns_all(self):
        self.assertEqual(search_products("").count(), 2)

"""Tests for slug and SKU helpers."""

import pytest

from mustore.catalogue.shared import sku_errors, slugify


class TestSlugify:
    def test_latin(self):
        assert slugify("Fender Player Stratocaster") == "fender-player-stratocaster"

    def test_cyrillic_is_transliterated(self):
        assert slugify("Гитары") == "gitary"

    def test_punctuation_collapses(self):
        assert slugify("  Drums & Percussion!! ") == "drums-percussion"


class TestSkuErrors:
    def test_valid(self):
        assert sku_errors("FEN-STRAT-PLR") == []

    @pytest.mark.parametrize("code", ["BAD SKU", "-LEAD", "TRAIL-", "A--B", "ЮЯ-1"])
    def test_invalid(self, code):
        assert sku_errors(code)

"""
Tests for per-field extraction

Tests the pattern cascades for title, dimensions, quantity, materials,
finishes and construction notes, plus the draft status of extracted items.
"""

import re
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rfq_extractor.models import ItemSection, ItemStatus
from rfq_extractor.parsers.fields import (
    extract, extract_combined_dimensions, extract_construction_notes,
    extract_dimension, extract_finishes, extract_item, extract_primary_material,
    extract_quantity, extract_title, first_match
)


LABELED_SECTION = (
    "Product Name: Oak Table Length (in): 24 Depth (in): 30 Height (in): 28 "
    "Quantity: 2 Primary Material: Oak Finishes: Matte Construction Notes: Reinforced legs"
)


class TestLabeledItem:
    """A fully labeled section yields every field."""

    @pytest.fixture
    def item(self):
        return extract_item(LABELED_SECTION, 1)

    def test_title(self, item):
        assert item.title == "Oak Table"

    def test_dimensions(self, item):
        assert (item.length, item.depth, item.height) == (24.0, 30.0, 28.0)

    def test_quantity(self, item):
        assert item.quantity == 2

    def test_materials_and_finishes(self, item):
        assert item.primary_material == "Oak"
        assert item.finishes == "Matte"

    def test_construction_notes(self, item):
        assert item.construction_notes == "Reinforced legs"

    def test_draft_status(self, item):
        assert item.status == ItemStatus.EXTRACTED
        assert item.review_reason is None

    def test_extract_uses_section_ordinal(self):
        item = extract(ItemSection(text="Length (in): 24 Quantity: 3", ordinal=4))
        assert item.title == "Item 4"


class TestTitle:
    """Tests for the title cascade and cleanup."""

    def test_missing_title_defaults(self):
        item = extract_item("Length (in): 24 Quantity: 3", 3)
        assert item.title == "Item 3"
        assert item.status == ItemStatus.NEEDS_REVIEW
        assert item.review_reason == "Missing or unclear title"

    def test_too_short_title_is_rejected(self):
        assert extract_title("Product Name: X Length (in): 5") == ""

    def test_product_label_fallback(self):
        assert extract_title("Product: Lounge Chair\nQuantity: 4") == "Lounge Chair"

    def test_wrapped_title_is_joined(self):
        """A title broken over two lines runs on to the next label."""
        text = "Product Name: Executive Office\nChair\nLength (in): 24"
        assert extract_title(text) == "Executive Office Chair"

    def test_title_ends_at_label_on_next_line(self):
        assert extract_title("Product Name: Oak Table\nQuantity: 2\nNotes: front") == "Oak Table"

    def test_title_cleanup_splits_merged_words(self):
        assert extract_title("Product Name: Executive*OfficeChair! Length (in): 24") == (
            "Executive Office Chair"
        )

    def test_title_stops_at_next_item_marker(self):
        assert extract_title("Product Name: Oak Table Item 2: Product Name: Bench") == "Oak Table"


class TestDimensions:
    """Tests for label-anchored and combined dimensions."""

    def test_loose_labels(self):
        text = "Length: 40\nDepth: 20\nHeight: 30"
        assert extract_dimension(text, 'length') == 40.0
        assert extract_dimension(text, 'depth') == 20.0
        assert extract_dimension(text, 'height') == 30.0

    def test_units_after_value(self):
        text = 'Length (in): 24" Depth (in): 30 in Height (in): 28.5 inches'
        assert extract_dimension(text, 'length') == 24.0
        assert extract_dimension(text, 'depth') == 30.0
        assert extract_dimension(text, 'height') == 28.5

    def test_height_range_keeps_lower_bound(self):
        assert extract_dimension("Height (in): 28.5 - 48.0 Quantity: 1", 'height') == 28.5

    def test_unparsable_value(self):
        assert extract_dimension("Length (in): abc", 'length') == 0.0

    def test_missing_value(self):
        assert extract_dimension("Quantity: 2", 'depth') == 0.0

    def test_combined_fallback(self):
        item = extract_item("Product Name: Side Table Size: 24 x 18 x 22 Quantity: 2", 1)
        assert (item.length, item.depth, item.height) == (24.0, 18.0, 22.0)

    def test_combined_with_inch_marks(self):
        assert extract_combined_dimensions('60" x 16" x 18"') == (60.0, 16.0, 18.0)

    def test_combined_does_not_override_found_dimension(self):
        """The combined token only fills in when no dimension was found."""
        item = extract_item("Length (in): 36 Size: 24 x 18 x 22", 1)
        assert (item.length, item.depth, item.height) == (36.0, 0.0, 0.0)

    def test_combined_skips_labeled_value(self):
        """An "L x D x H" token right after a dimension label is not a fallback source."""
        assert extract_combined_dimensions("Length (in): 24 x 18 x 22") is None
        item = extract_item("Length (in): 24 x 18 x 22", 1)
        assert (item.length, item.depth, item.height) == (0.0, 0.0, 0.0)


class TestQuantity:

    @pytest.mark.parametrize("text,expected", [
        ("Quantity: 4", 4),
        ("Qty: 3 pcs", 3),
        ("Qty.: 12 each", 12),
        ("Quantity: 4 Item 2: Product Name: Bench", 4),
        ("Quantity: two", 0),
        ("No quantity here", 0),
    ])
    def test_extract_quantity(self, text, expected):
        assert extract_quantity(text) == expected


class TestMaterialsAndFinishes:
    """Tests for material, finish and notes cleanup."""

    def test_primary_material(self):
        assert extract_primary_material("Primary Material: White Oak Finishes: Natural") == "White Oak"

    def test_generic_material_takes_first_entry(self):
        assert extract_primary_material("Material: Steel, Glass; Fabric") == "Steel"

    def test_material_cleanup(self):
        assert extract_primary_material("Primary Material: Oak (FSC)* Finishes: Oil") == "Oak FSC"

    def test_no_material(self):
        assert extract_primary_material("Quantity: 2") == ""

    def test_finish_label(self):
        assert extract_finishes("Finish: Satin Brass\nQuantity: 2") == "Satin Brass"

    def test_wrapped_material_and_finishes(self):
        text = (
            "Primary Material: Solid white oak with\nwalnut inlay\n"
            "Finishes: Matte\nlacquer"
        )
        assert extract_primary_material(text) == "Solid white oak with walnut inlay"
        assert extract_finishes(text) == "Matte lacquer"

    def test_wrapped_generic_material(self):
        assert extract_primary_material("Material: Brushed\nsteel, Glass\nQuantity: 1") == "Brushed steel"

    def test_notes_keep_basic_punctuation(self):
        text = "Construction Notes: Reinforced legs, (mortise & tenon)!\nExtra line"
        assert extract_construction_notes(text) == "Reinforced legs, (mortise tenon)! Extra line"

    def test_notes_stop_at_item_marker(self):
        text = "Construction Notes: Reinforced legs Item 2: Product Name: Bench"
        assert extract_construction_notes(text) == "Reinforced legs"


class TestFirstMatch:
    """The first accepted value in pattern order wins."""

    def test_skips_rejected_values(self):
        patterns = [re.compile(r'A(\d)'), re.compile(r'B(\d)')]
        assert first_match(patterns, "A0 B5", int, lambda v: v > 0) == 5

    def test_earlier_pattern_wins(self):
        patterns = [re.compile(r'B(\d)'), re.compile(r'A(\d)')]
        assert first_match(patterns, "A1 B2", int, lambda v: v > 0) == 2

    def test_no_match(self):
        assert first_match([re.compile(r'A(\d)')], "nothing", int, bool) is None

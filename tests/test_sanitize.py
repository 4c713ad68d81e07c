"""Tests for sanitization of imported documents."""

from shoppinglist.transfer.sanitize import (
    escape_quotes,
    sanitize_string,
    sanitize_value,
    strip_markup,
)


class TestStripMarkup:
    """Tests for HTML removal."""

    def test_plain_text_untouched(self):
        """Test that text without markup is returned as is."""
        assert strip_markup("Chicken soup") == "Chicken soup"

    def test_script_removed_with_content(self):
        """Test that script elements disappear entirely."""
        assert strip_markup("<script>alert(1)</script>Trip") == "Trip"

    def test_tags_removed_text_kept(self):
        """Test that ordinary tags are dropped but their text stays."""
        assert strip_markup("<b>Bold</b> <i>move</i>") == "Bold move"

    def test_style_and_iframe_removed(self):
        """Test that style and iframe contents are dropped."""
        value = "<style>body{}</style>Soup<iframe src='x'>frame</iframe>"
        assert strip_markup(value) == "Soup"

    def test_entity_encoded_script_removed(self):
        """Test that markup hidden behind entities is stripped too."""
        assert strip_markup("&lt;script&gt;alert(1)&lt;/script&gt;Trip") == "Trip"

    def test_ampersand_text_kept(self):
        """Test that a literal ampersand survives."""
        assert strip_markup("Mac & Cheese") == "Mac & Cheese"


class TestEscapeQuotes:
    """Tests for quote doubling."""

    def test_single_quotes_doubled(self):
        """Test that each single quote is doubled."""
        assert escape_quotes("Mom's Week") == "Mom''s Week"

    def test_no_quotes(self):
        """Test that text without quotes is unchanged."""
        assert escape_quotes("Tacos") == "Tacos"

    def test_sanitize_string_combines_both(self):
        """Test that markup is stripped before quotes are doubled."""
        assert sanitize_string("<em>Bob's</em> chili") == "Bob''s chili"


class TestSanitizeValue:
    """Tests for recursive sanitization."""

    def test_nested_structures(self):
        """Test that strings in nested dicts and lists are cleaned."""
        value = {
            "data": {
                "meals": [
                    {"title": "<script>x</script>Stew", "day_of_week": 2, "notes": None},
                ],
            },
        }
        assert sanitize_value(value) == {
            "data": {"meals": [{"title": "Stew", "day_of_week": 2, "notes": None}]},
        }

    def test_keys_sanitized(self):
        """Test that dictionary keys are cleaned as well."""
        assert sanitize_value({"<b>name</b>": "x"}) == {"name": "x"}

    def test_scalars_pass_through(self):
        """Test that numbers, booleans and None are untouched."""
        assert sanitize_value(5) == 5
        assert sanitize_value(2.5) == 2.5
        assert sanitize_value(True) is True
        assert sanitize_value(None) is None

    def test_tuples_become_lists(self):
        """Test that tuples come back as lists."""
        assert sanitize_value(("a", "<i>b</i>")) == ["a", "b"]

    def test_input_not_modified(self):
        """Test that the caller's document is not changed in place."""
        value = {"title": "<b>Stew</b>"}
        sanitize_value(value)
        assert value == {"title": "<b>Stew</b>"}

import unittest

from aurynx.compiler.attributes import is_bound, parse_attributes, prop_name


class TestAttributeParsing(unittest.TestCase):
    def test_static_bound_and_valueless(self):
        attrs = parse_attributes('title="Static" :post="$post" required')
        self.assertEqual(attrs, {"title": "Static", ":post": "$post", "required": True})
        self.assertEqual(list(attrs), ["title", ":post", "required"])

    def test_single_quotes_and_spacing(self):
        attrs = parse_attributes("class = 'card wide' :count = \"$n + 1\"")
        self.assertEqual(attrs, {"class": "card wide", ":count": "$n + 1"})

    def test_later_duplicates_win(self):
        attrs = parse_attributes('a="1" b="2" a="3"')
        self.assertEqual(attrs, {"a": "3", "b": "2"})
        self.assertEqual(list(attrs), ["a", "b"])

    def test_empty_source(self):
        self.assertEqual(parse_attributes(""), {})

    def test_names_with_dashes_and_dots(self):
        attrs = parse_attributes('data-id="7" wire.model="name"')
        self.assertEqual(attrs, {"data-id": "7", "wire.model": "name"})

    def test_bind_marker_helpers(self):
        self.assertTrue(is_bound(":post"))
        self.assertFalse(is_bound("post"))
        self.assertEqual(prop_name(":post"), "post")
        self.assertEqual(prop_name("title"), "title")

"""Tests for the YAML codec."""

from datetime import date

import pytest

from folio import codec
from folio.errors import EncodeError, UnsupportedFormat


class TestCheckFormat:
    def test_yaml_accepted(self):
        codec.check_format("document.yaml")
        codec.check_format("nested/dir/views.yaml")

    @pytest.mark.parametrize("path", ["foo.ini", "foo.json", "foo.yml", "foo"])
    def test_other_extensions_rejected(self, path: str):
        with pytest.raises(UnsupportedFormat, match=f"{path} is not a valid file type"):
            codec.check_format(path)


class TestDecode:
    def test_sequence_of_mappings(self):
        text = "- name: Title\n  type: Case Insensitive Text\n"
        assert codec.decode(text, "schema.yaml") == [
            {"name": "Title", "type": "Case Insensitive Text"}
        ]

    def test_nested_document(self):
        text = "Document:\n  - Title: Foo\n  - Title: Bar\n"
        assert codec.decode(text, "document.yaml") == {
            "Document": [{"Title": "Foo"}, {"Title": "Bar"}]
        }

    def test_empty_text(self):
        assert codec.decode("", "document.yaml") is None

    def test_unsupported_format(self):
        with pytest.raises(UnsupportedFormat):
            codec.decode("foo=bar\nbar=baz", "foo.ini")


class TestEncode:
    def test_round_trip(self):
        value = [
            {"title": "Shelder", "Caught": False, "Height": 2, "Weight": 3.5},
            {"title": "Charmander", "Favourite": "#Yes", "tags": ["fire", "lizard"]},
            {"title": "Nothing", "Description": None, "seen": date(2018, 1, 17)},
        ]
        assert codec.decode(codec.encode(value, "doc.yaml"), "doc.yaml") == value

    def test_block_style_keeps_key_order(self):
        text = codec.encode([{"b": 1, "a": 2}], "doc.yaml")
        assert text == "- b: 1\n  a: 2\n"

    def test_repeated_objects_are_not_aliased(self):
        shared = {"name": "x"}
        text = codec.encode({"first": shared, "second": shared}, "doc.yaml")
        assert "&" not in text
        assert "*" not in text

    def test_drops_unserializable_values(self):
        value = {"title": "Foo", "callback": print, "items": [1, object(), 2]}
        decoded = codec.decode(codec.encode(value, "doc.yaml"), "doc.yaml")
        assert decoded == {"title": "Foo", "items": [1, 2]}

    def test_unserializable_root_is_fatal(self):
        with pytest.raises(EncodeError):
            codec.encode(object(), "doc.yaml")

    def test_unsupported_format(self):
        with pytest.raises(UnsupportedFormat, match="foo.ini is not a valid file type"):
            codec.encode({"foo": "qux"}, "foo.ini")

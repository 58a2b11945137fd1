"""Tests for predicate coercion and loose equality."""

import pytest

from csvdb.matching import ByFields, ById, as_predicate, loose_equals, matches


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("1", 1, True),
        ("1.0", "1", True),
        ("01", 1, True),
        (" 2 ", 2, True),
        ("a", "a", True),
        ("a", "b", False),
        ("A", "a", False),
        (None, None, True),
        (None, "", False),
        ("", 0, False),
        ("nan", "nan", True),
        (True, "True", True),
    ],
)
def test_loose_equals(a, b, expected):
    assert loose_equals(a, b) is expected


class TestAsPredicate:
    def test_none_means_no_predicate(self):
        assert as_predicate(None) is None

    def test_mapping_becomes_by_fields(self):
        assert as_predicate({"name": "x"}) == ByFields({"name": "x"})

    def test_scalar_becomes_by_id(self):
        assert as_predicate(3) == ById(3)
        assert as_predicate("3") == ById("3")

    def test_existing_predicate_passes_through(self):
        pred = ById(1)
        assert as_predicate(pred) is pred


class TestMatches:
    def test_by_id_numeric_string(self):
        assert matches({"id": "2", "name": "x"}, ById(2))
        assert not matches({"id": "2"}, ById(3))

    def test_record_without_id(self):
        assert not matches({"name": "x"}, ById(1))

    def test_by_fields_requires_every_pair(self):
        record = {"id": "1", "name": "x", "status": "open"}
        assert matches(record, ByFields({"name": "x", "status": "open"}))
        assert not matches(record, ByFields({"name": "x", "status": "done"}))

    def test_empty_fields_match_everything(self):
        assert matches({"id": "9"}, ByFields())

    def test_field_names_are_case_sensitive(self):
        assert not matches({"name": "x"}, ByFields({"Name": "x"}))

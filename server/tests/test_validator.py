"""Tests for the accumulating Validator."""

from music_library.validator import Validator, permitted_value


class TestValidator:
    def test_new_validator_is_valid(self):
        assert Validator().valid() is True

    def test_failed_check_records_error(self):
        v = Validator()
        v.check(False, "page", "must be greater than zero")
        assert v.valid() is False
        assert v.errors == {"page": "must be greater than zero"}

    def test_passed_check_records_nothing(self):
        v = Validator()
        v.check(True, "page", "must be greater than zero")
        assert v.valid() is True
        assert v.errors == {}

    def test_first_failure_per_field_wins(self):
        v = Validator()
        v.check(False, "page", "first")
        v.check(False, "page", "second")
        v.add_error("page", "third")
        assert v.errors == {"page": "first"}

    def test_failures_accumulate_across_fields(self):
        v = Validator()
        v.check(False, "page", "bad page")
        v.check(False, "page_size", "bad size")
        v.check(False, "sort", "bad sort")
        assert set(v.errors) == {"page", "page_size", "sort"}


class TestPermittedValue:
    def test_member(self):
        assert permitted_value("-id", ("id", "-id")) is True

    def test_not_member(self):
        assert permitted_value("name", ("id", "-id")) is False

    def test_match_is_verbatim(self):
        assert permitted_value("ID", ("id",)) is False
        assert permitted_value(" id", ("id",)) is False

"""Unit tests for book validation and coercion."""

from datetime import UTC, datetime

import pytest

from src.mylibrary.core.errors import ValidationFailed
from src.mylibrary.entities.service.book import BookStatus, parse_book_query, validate_book_fields


def _fields_in_error(exc_info) -> set[str]:
    return {error.field for error in exc_info.value.errors}


class TestBookFields:
    def test_minimal_book_gets_defaults(self):
        fields = validate_book_fields({"title": "Dune", "author": "Herbert"})

        assert fields.status == BookStatus.TO_READ
        assert fields.rating is None
        assert fields.genre is None

    def test_whitespace_is_trimmed(self):
        fields = validate_book_fields({"title": "  Dune ", "author": " Herbert"})

        assert fields.title == "Dune"
        assert fields.author == "Herbert"

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"author": "Herbert"}, "title"),
            ({"title": "", "author": "Herbert"}, "title"),
            ({"title": "   ", "author": "Herbert"}, "title"),
            ({"title": "x" * 256, "author": "Herbert"}, "title"),
            ({"title": "Dune"}, "author"),
            ({"title": "Dune", "author": "Herbert", "genre": "g" * 101}, "genre"),
            ({"title": "Dune", "author": "Herbert", "isbn": "1" * 21}, "isbn"),
            ({"title": "Dune", "author": "Herbert", "publication_year": 999}, "publication_year"),
            ({"title": "Dune", "author": "Herbert", "pages": 0}, "pages"),
            ({"title": "Dune", "author": "Herbert", "pages": 10001}, "pages"),
            ({"title": "Dune", "author": "Herbert", "pages": "many"}, "pages"),
            ({"title": "Dune", "author": "Herbert", "status": "finished"}, "status"),
            ({"title": "Dune", "author": "Herbert", "status": "read", "rating": 6}, "rating"),
            ({"title": "Dune", "author": "Herbert", "status": "read", "rating": 0}, "rating"),
        ],
    )
    def test_out_of_bounds(self, data, field):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_book_fields(data)

        assert field in _fields_in_error(exc_info)
        assert exc_info.value.status_code == 400

    def test_all_problems_reported_together(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_book_fields({"title": "", "author": "", "pages": -1})

        assert _fields_in_error(exc_info) == {"title", "author", "pages"}

    def test_year_bounds_follow_the_calendar(self):
        next_year = datetime.now(UTC).year + 1

        assert validate_book_fields(
            {"title": "Dune", "author": "Herbert", "publication_year": next_year}
        ).publication_year == next_year

        with pytest.raises(ValidationFailed) as exc_info:
            validate_book_fields(
                {"title": "Dune", "author": "Herbert", "publication_year": next_year + 1}
            )
        assert "publication_year" in _fields_in_error(exc_info)

    def test_numeric_strings_are_coerced(self):
        fields = validate_book_fields(
            {"title": "Dune", "author": "Herbert", "pages": "412", "publication_year": "1965"}
        )

        assert fields.pages == 412
        assert fields.publication_year == 1965

    def test_blank_optional_values_are_absent(self):
        fields = validate_book_fields(
            {
                "title": "Dune",
                "author": "Herbert",
                "genre": "",
                "isbn": "  ",
                "notes": "",
                "pages": "",
                "publication_year": "",
                "status": "",
                "rating": "",
            }
        )

        assert fields.genre is None
        assert fields.isbn is None
        assert fields.notes is None
        assert fields.pages is None
        assert fields.publication_year is None
        assert fields.status == BookStatus.TO_READ

    def test_unknown_fields_are_ignored(self):
        fields = validate_book_fields(
            {"title": "Dune", "author": "Herbert", "owner_id": "someone-else", "id": "x"}
        )

        assert "owner_id" not in fields.model_dump()


class TestRatingGate:
    """A rating only survives on a book whose status is ``read``."""

    @pytest.mark.parametrize("status", ["to_read", "reading", None])
    def test_rating_dropped_when_not_read(self, status):
        data = {"title": "Dune", "author": "Herbert", "rating": 5}
        if status is not None:
            data["status"] = status

        assert validate_book_fields(data).rating is None

    def test_rating_kept_when_read(self):
        fields = validate_book_fields(
            {"title": "Dune", "author": "Herbert", "status": "read", "rating": 4}
        )

        assert fields.rating == 4


class TestBookQuery:
    def test_defaults(self):
        query = parse_book_query({})

        assert query.page == 1
        assert query.limit == 10
        assert query.offset == 0

    def test_string_parameters_are_coerced(self):
        query = parse_book_query({"page": "3", "limit": "20", "status": "reading"})

        assert query.page == 3
        assert query.limit == 20
        assert query.offset == 40
        assert query.status == BookStatus.READING

    def test_blank_parameters_are_absent(self):
        query = parse_book_query({"search": "", "status": " ", "page": "", "limit": None})

        assert query.search is None
        assert query.status is None
        assert query.page == 1
        assert query.limit == 10

    @pytest.mark.parametrize(
        "params, field",
        [
            ({"page": "0"}, "page"),
            ({"page": "abc"}, "page"),
            ({"limit": "0"}, "limit"),
            ({"limit": "101"}, "limit"),
            ({"status": "done"}, "status"),
        ],
    )
    def test_invalid_parameters(self, params, field):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_book_query(params)

        assert field in _fields_in_error(exc_info)

"""
Unit tests for the explorer's query engine.
Run: pytest tests/ -v
"""

from __future__ import annotations

from conftest import make_book

from bookshelf.explorer.query_engine import (
    active_filter_count,
    collation_key,
    derive_view,
    filter_by_price,
    parse_timestamp,
    result_count,
)
from bookshelf.schemas.book import BookRecord
from bookshelf.schemas.query import PriceRange, QuerySpec


def _titles(books):
    return [b.title for b in books]


def _ids(books):
    return [b.id for b in books]


class TestDefaults:
    def test_empty_spec_sorts_by_title_ascending(self):
        books = [make_book(1, "banana"), make_book(2, "Apple"), make_book(3, "cherry")]
        assert _titles(derive_view(books, QuerySpec())) == ["Apple", "banana", "cherry"]

    def test_none_spec_behaves_like_empty_spec(self, sample_books):
        assert derive_view(sample_books) == derive_view(sample_books, QuerySpec())

    def test_equal_titles_keep_input_order(self):
        books = [make_book(7, "Same"), make_book(3, "Same"), make_book(5, "Same")]
        assert _ids(derive_view(books, QuerySpec())) == [7, 3, 5]

    def test_deterministic(self, sample_books):
        spec = QuerySpec(term="e", sort_by="price", sort_order="desc")
        assert derive_view(sample_books, spec) == derive_view(sample_books, spec)

    def test_input_not_mutated(self, sample_books):
        before = list(sample_books)
        derive_view(sample_books, QuerySpec(sort_by="price", sort_order="desc", genre="fantasy"))
        assert sample_books == before


class TestTextFilter:
    def test_case_insensitive_substring(self):
        books = [make_book(1, "Alpha"), make_book(2, "Beta"), make_book(3, "alphabet")]
        assert _titles(derive_view(books, QuerySpec(term="alph"))) == ["Alpha", "alphabet"]

    def test_matches_author_and_isbn(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(term="TOLKIEN"))) == [2]
        assert _ids(derive_view(sample_books, QuerySpec(term="0441172719"))) == [1]

    def test_description_is_not_searched(self):
        books = [make_book(1, "Plain", description="contains dragons")]
        assert derive_view(books, QuerySpec(term="dragons")) == []

    def test_term_is_trimmed(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(term="  dune  "))) == [1]

    def test_blank_term_keeps_everything(self, sample_books):
        assert len(derive_view(sample_books, QuerySpec(term="   "))) == len(sample_books)

    def test_missing_isbn_is_treated_as_empty(self):
        books = [make_book(1, "No Isbn")]
        assert derive_view(books, QuerySpec(term="none")) == []


class TestStructuredFilters:
    def test_genre_is_exact_and_case_insensitive(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(genre="FICTION"))) == [4]
        assert derive_view(sample_books, QuerySpec(genre="Fict")) == []

    def test_genre_filter_skips_books_without_genre(self):
        books = [make_book(1, "A"), make_book(2, "B", genre="Mystery")]
        assert _ids(derive_view(books, QuerySpec(genre="mystery"))) == [2]

    def test_zero_priced_book_inside_inclusive_range(self, sample_books):
        spec = QuerySpec(price_range=PriceRange(min=0, max=10))
        assert _ids(derive_view(sample_books, spec)) == [1, 4, 2]

    def test_range_bounds_are_inclusive(self):
        books = [make_book(1, "A", price=5), make_book(2, "B", price=10), make_book(3, "C", price=10.01)]
        assert _ids(filter_by_price(books, 5, 10)) == [1, 2]

    def test_single_bound(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(price_range=PriceRange(max=9)))) == [4, 2]
        assert _ids(derive_view(sample_books, QuerySpec(price_range=PriceRange(min=10)))) == [3]

    def test_zero_max_is_a_real_bound(self, sample_books):
        spec = QuerySpec(price_range=PriceRange(min=0, max=0))
        assert _ids(derive_view(sample_books, spec)) == [4]

    def test_unset_range_is_no_filter(self, sample_books):
        spec = QuerySpec(price_range=PriceRange())
        assert len(derive_view(sample_books, spec)) == len(sample_books)

    def test_rating_threshold_treats_missing_as_zero(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(rating=4.5))) == [1, 2]
        assert len(derive_view(sample_books, QuerySpec(rating=0))) == len(sample_books)

    def test_filters_combine(self, sample_books):
        spec = QuerySpec(term="o", price_range=PriceRange(max=10), rating=4)
        assert _ids(derive_view(sample_books, spec)) == [2]
        assert result_count(sample_books, spec) == 1


class TestSorting:
    def test_equal_prices_keep_input_order(self):
        books = [
            make_book(1, "Z", price=5),
            make_book(2, "A", price=3),
            make_book(3, "M", price=5),
            make_book(4, "B", price=3),
        ]
        assert _ids(derive_view(books, QuerySpec(sort_by="price"))) == [2, 4, 1, 3]
        assert _ids(derive_view(books, QuerySpec(sort_by="price", sort_order="desc"))) == [1, 3, 2, 4]

    def test_rating_sort_treats_missing_as_zero(self):
        books = [make_book(1, "A", rating=3.5), make_book(2, "B"), make_book(3, "C", rating=5)]
        assert _ids(derive_view(books, QuerySpec(sort_by="rating", sort_order="desc"))) == [3, 1, 2]

    def test_author_sort(self, sample_books):
        assert _ids(derive_view(sample_books, QuerySpec(sort_by="author"))) == [1, 3, 2, 4]

    def test_title_descending(self):
        books = [make_book(1, "alpha"), make_book(2, "Charlie"), make_book(3, "bravo")]
        spec = QuerySpec(sort_by="title", sort_order="desc")
        assert _titles(derive_view(books, spec)) == ["Charlie", "bravo", "alpha"]

    def test_unknown_sort_field_falls_back_to_title(self):
        books = [make_book(1, "b", publisher="A"), make_book(2, "a", publisher="B")]
        assert _titles(derive_view(books, QuerySpec(sort_by="publisher"))) == ["a", "b"]

    def test_missing_dates_sort_first_ascending(self):
        books = [
            make_book(1, "New", publishedDate="2001-01-01"),
            make_book(2, "Unknown"),
            make_book(3, "Old", publishedDate="1999-05-05"),
            make_book(4, "Garbled", publishedDate="sometime soon"),
        ]
        assert _ids(derive_view(books, QuerySpec(sort_by="date"))) == [2, 4, 3, 1]

    def test_missing_dates_sort_last_descending(self):
        books = [
            make_book(1, "New", publishedDate="2001-01-01"),
            make_book(2, "Unknown"),
            make_book(3, "Old", publishedDate="1999-05-05"),
            make_book(4, "Garbled", publishedDate="sometime soon"),
        ]
        spec = QuerySpec(sort_by="date", sort_order="desc")
        assert _ids(derive_view(books, spec)) == [1, 3, 2, 4]

    def test_undated_sorts_around_pre_epoch_dates(self):
        books = [
            make_book(1, "Gatsby", publishedDate="1925-04-10"),
            make_book(2, "Unknown"),
            make_book(3, "Mockingbird", publishedDate="1960-07-11"),
        ]
        assert _ids(derive_view(books, QuerySpec(sort_by="date"))) == [2, 1, 3]
        spec = QuerySpec(sort_by="date", sort_order="desc")
        assert _ids(derive_view(books, spec)) == [3, 1, 2]

    def test_loose_records_do_not_raise(self):
        loose = BookRecord.model_construct(id=9, title="Loose")
        books = [make_book(1, "Priced", price=2), loose]
        assert _ids(derive_view(books, QuerySpec(sort_by="price"))) == [9, 1]
        assert _ids(derive_view(books, QuerySpec(term="loose", sort_by="author"))) == [9]


class TestHelpers:
    def test_collation_orders_case_insensitively_then_lower_first(self):
        words = ["b", "B", "a", "A", "é", "e"]
        assert sorted(words, key=collation_key) == ["a", "A", "b", "B", "e", "é"]

    def test_parse_timestamp_formats(self):
        assert parse_timestamp("1970-01-02") == 86400
        assert parse_timestamp("1970-01-01T00:01:00Z") == 60
        assert parse_timestamp("2020") > parse_timestamp("2019-12-31")
        assert parse_timestamp("March 3, 2020") > parse_timestamp("2020-03-02")

    def test_parse_timestamp_unparsable_is_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None
        assert parse_timestamp("not a date") is None

    def test_active_filter_count(self):
        assert active_filter_count(QuerySpec(term="x")) == 0
        assert active_filter_count(QuerySpec(genre="Fantasy", rating=3)) == 2
        assert active_filter_count(QuerySpec(price_range=PriceRange())) == 0
        assert active_filter_count(QuerySpec(sort_by="price", sort_order="desc")) == 2

"""Tests for SearchQuery, RangeFilter and request-parameter parsing."""

from __future__ import annotations

import pytest

from matsearch.models.query import DatasetScope, InvalidQueryError, RangeFilter, SearchQuery


class TestRangeFilter:
    def test_no_bounds_is_inactive(self) -> None:
        assert not RangeFilter().active

    @pytest.mark.parametrize("bounds", [{"min": 1.0}, {"max": 2.0}, {"min": 1.0, "max": 2.0}])
    def test_any_bound_activates(self, bounds: dict[str, float]) -> None:
        assert RangeFilter(**bounds).active

    def test_bounds_are_inclusive(self) -> None:
        f = RangeFilter(min=1.0, max=3.0)
        assert f.admits(1.0)
        assert f.admits(3.0)
        assert f.admits(2.0)
        assert not f.admits(0.99)
        assert not f.admits(3.01)

    def test_open_ended(self) -> None:
        assert RangeFilter(min=1.0).admits(1e9)
        assert RangeFilter(max=1.0).admits(-1e9)

    def test_absent_value_never_admitted(self) -> None:
        assert not RangeFilter(min=1.0).admits(None)
        assert not RangeFilter(max=1.0).admits(None)


class TestSearchQuery:
    def test_defaults(self) -> None:
        query = SearchQuery()
        assert query.q is None
        assert query.dataset is DatasetScope.ALL
        assert query.page == 1
        assert query.page_size == 24
        assert query.range_filters() == {}

    def test_blank_text_is_no_text(self) -> None:
        assert SearchQuery(q="   ").q is None
        assert SearchQuery(q="   ").needle is None

    def test_needle_is_lowercased(self) -> None:
        assert SearchQuery(q="Al2O3").needle == "al2o3"

    def test_range_filters_only_active(self) -> None:
        query = SearchQuery(band_gap=RangeFilter(min=1.0))
        assert list(query.range_filters()) == ["band_gap"]

    def test_page_size_alias(self) -> None:
        assert SearchQuery(pageSize=10).page_size == 10
        assert SearchQuery(page_size=12).page_size == 12


class TestFromParams:
    def test_full_parameter_set(self) -> None:
        query = SearchQuery.from_params(
            {
                "q": "SiC",
                "dataset": "local",
                "page": "2",
                "pageSize": "10",
                "bandGapMin": "1",
                "bandGapMax": "3.5",
                "toughMin": "2",
                "densMax": "4",
            }
        )
        assert query.q == "SiC"
        assert query.dataset is DatasetScope.LOCAL
        assert query.page == 2
        assert query.page_size == 10
        assert query.band_gap == RangeFilter(min=1.0, max=3.5)
        assert query.fracture_toughness == RangeFilter(min=2.0)
        assert query.density == RangeFilter(max=4.0)

    def test_empty_strings_are_missing(self) -> None:
        query = SearchQuery.from_params({"q": "", "bandGapMin": "", "page": "", "dataset": ""})
        assert query == SearchQuery()

    def test_unknown_keys_ignored(self) -> None:
        assert SearchQuery.from_params({"sort": "asc"}) == SearchQuery()

    def test_numbers_accepted(self) -> None:
        query = SearchQuery.from_params({"bandGapMin": 1, "page": 3})
        assert query.band_gap.min == 1.0
        assert query.page == 3

    def test_out_of_range_paging_is_accepted(self) -> None:
        # Clamping happens at pagination time, not at parse time.
        query = SearchQuery.from_params({"page": "-4", "pageSize": "500"})
        assert query.page == -4
        assert query.page_size == 500

    @pytest.mark.parametrize("param", ["bandGapMin", "bandGapMax", "toughMin", "toughMax", "densMin", "densMax"])
    def test_non_numeric_bound_rejected(self, param: str) -> None:
        with pytest.raises(InvalidQueryError, match="Invalid search query"):
            SearchQuery.from_params({param: "abc"})

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
    def test_non_finite_bound_rejected(self, value: str) -> None:
        with pytest.raises(InvalidQueryError):
            SearchQuery.from_params({"densMin": value})

    @pytest.mark.parametrize(("param", "value"), [("page", "two"), ("pageSize", "2.5")])
    def test_non_integer_paging_rejected(self, param: str, value: str) -> None:
        with pytest.raises(InvalidQueryError):
            SearchQuery.from_params({param: value})

    @pytest.mark.parametrize("dataset", ["mp", "ml", "ALL", "everything"])
    def test_unknown_dataset_rejected(self, dataset: str) -> None:
        with pytest.raises(InvalidQueryError, match="dataset"):
            SearchQuery.from_params({"dataset": dataset})

    def test_invalid_query_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            SearchQuery.from_params({"dataset": "bogus"})

"""Tests for the transaction list filter."""

from datetime import date

from ledger.models.transaction import FilterSpec, FilterType, TransactionType
from ledger.queries.filters import filter_transactions, matches_filter


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def _is_subsequence(subset, full) -> bool:
    it = iter(full)
    return all(any(item is candidate for candidate in it) for item in subset)


class TestIdentityFilter:
    """Tests for a spec with nothing active."""

    def test_unbounded_spec_returns_everything(self, scenario):
        """Test the identity filter keeps every transaction in order."""
        assert filter_transactions(scenario, FilterSpec.unbounded()) == scenario

    def test_empty_input(self):
        """Test filtering nothing gives nothing."""
        assert filter_transactions([], FilterSpec.unbounded()) == []


class TestTypeFilter:
    """Tests for the income/expense selector."""

    def test_expense_only(self, scenario):
        """Test the two expenses come back in original relative order."""
        result = filter_transactions(scenario, FilterSpec.unbounded(type=FilterType.EXPENSE))
        assert [t.id for t in result] == [scenario[0].id, scenario[2].id]

    def test_income_only(self, scenario):
        """Test only the salary is income."""
        result = filter_transactions(scenario, FilterSpec.unbounded(type=FilterType.INCOME))
        assert [t.id for t in result] == [scenario[1].id]


class TestCategoryFilter:
    """Tests for the category substring."""

    def test_case_insensitive_substring(self, make_transaction):
        """Test partial, differently-cased category text matches."""
        food = make_transaction(category="Fast Food")
        rent = make_transaction(category="Rent")
        spec = FilterSpec.unbounded(category_substring="FOOD")
        assert filter_transactions([food, rent], spec) == [food]

    def test_category_filter_ignores_description(self, make_transaction):
        """Test the category filter looks only at the category."""
        tx = make_transaction(category="Transport", description="food truck")
        assert filter_transactions([tx], FilterSpec.unbounded(category_substring="food")) == []


class TestDateRange:
    """Tests for the always-active date range."""

    def test_bounds_are_inclusive(self, make_transaction):
        """Test transactions on the first and last day are kept."""
        before = make_transaction(on=date(2024, 1, 31))
        first = make_transaction(on=date(2024, 2, 1))
        last = make_transaction(on=date(2024, 2, 29))
        after = make_transaction(on=date(2024, 3, 1))
        spec = FilterSpec(date_from=date(2024, 2, 1), date_to=date(2024, 2, 29))
        assert filter_transactions([before, first, last, after], spec) == [first, last]

    def test_default_spec_shows_this_month(self, make_transaction):
        """Test the default range drops last month and keeps today."""
        today = date.today()
        this_month = make_transaction(on=today)
        older = make_transaction(on=date(today.year - 1, 12, 31))
        assert filter_transactions([older, this_month], FilterSpec()) == [this_month]

    def test_inverted_range_matches_nothing(self, scenario):
        """Test an empty range is not an error."""
        spec = FilterSpec(date_from=date(2024, 3, 1), date_to=date(2024, 1, 1))
        assert filter_transactions(scenario, spec) == []


class TestSearch:
    """Tests for the free-text search."""

    def test_search_matches_category(self, scenario):
        """Test "sal" finds the Salary transaction."""
        result = filter_transactions(scenario, FilterSpec.unbounded(search_text="sal"))
        assert [t.id for t in result] == [scenario[1].id]

    def test_search_matches_description(self, scenario):
        """Test search also looks at the description."""
        result = filter_transactions(scenario, FilterSpec.unbounded(search_text="RESTAUR"))
        assert [t.id for t in result] == [scenario[2].id]

    def test_search_without_match(self, scenario):
        """Test a search term found nowhere."""
        assert filter_transactions(scenario, FilterSpec.unbounded(search_text="zzz")) == []


class TestCombinedCriteria:
    """Tests for criteria ANDed together."""

    def test_all_criteria_must_hold(self, make_transaction):
        """Test a transaction failing any single criterion is dropped."""
        keep = make_transaction(EXPENSE, category="Food", on=date(2024, 5, 5), description="market")
        wrong_type = make_transaction(INCOME, category="Food", on=date(2024, 5, 5), description="market")
        wrong_date = make_transaction(EXPENSE, category="Food", on=date(2024, 6, 5), description="market")
        wrong_text = make_transaction(EXPENSE, category="Food", on=date(2024, 5, 5), description="cinema")
        spec = FilterSpec(
            type=FilterType.EXPENSE,
            category_substring="fo",
            date_from=date(2024, 5, 1),
            date_to=date(2024, 5, 31),
            search_text="mark",
        )
        transactions = [wrong_type, keep, wrong_date, wrong_text]
        assert filter_transactions(transactions, spec) == [keep]
        assert matches_filter(keep, spec) is True
        assert matches_filter(wrong_text, spec) is False

    def test_result_is_ordered_subsequence(self, make_transaction):
        """Test output keeps input order for a non-trivial spec."""
        transactions = [
            make_transaction(EXPENSE if i % 2 else INCOME, i + 1, on=date(2024, 1, 1 + i))
            for i in range(10)
        ]
        spec = FilterSpec(
            type=FilterType.EXPENSE,
            date_from=date(2024, 1, 3),
            date_to=date(2024, 1, 9),
        )
        result = filter_transactions(transactions, spec)
        assert [t.transaction_date.day for t in result] == [4, 6, 8]
        assert _is_subsequence(result, transactions)

    def test_filter_is_idempotent_and_pure(self, scenario):
        """Test re-running gives the same result and leaves input alone."""
        before = list(scenario)
        spec = FilterSpec.unbounded(type=FilterType.EXPENSE)
        first = filter_transactions(scenario, spec)
        second = filter_transactions(scenario, spec)
        assert first == second
        assert filter_transactions(first, spec) == first
        assert scenario == before

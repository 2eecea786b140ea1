"""Unit tests for territorial aggregation"""

import pytest

from dvf_explorer.aggregation import (
    TerritoryStats,
    TransactionAggregator,
    aggregate_median_by_key,
    build_indexes,
    compute_stats,
    compute_stats_by_dept,
)
from dvf_explorer.models.geography import TerritoryScale
from dvf_explorer.models.transaction import PropertyType


class TestComputeStats:
    """Test statistics on a transaction list"""

    def test_paris_stats(self, paris_transactions):
        stats = compute_stats(paris_transactions)

        assert stats.count == 3
        assert stats.median_price == 9000
        assert stats.house_count == 1
        assert stats.apartment_count == 2
        assert stats.house_median_price == 9000
        assert stats.apartment_median_price == 9000  # (8000 + 10000) / 2

    def test_unusable_records_ignored(self, transaction_factory):
        transactions = [
            transaction_factory(5000),
            transaction_factory(value=200000, surface=0),
            transaction_factory(value=None, surface=40.0),
        ]
        stats = compute_stats(transactions)
        assert stats.count == 1
        assert stats.median_price == 5000

    def test_empty_input(self):
        stats = compute_stats([])
        assert stats == TerritoryStats()
        assert stats.median_price is None
        assert compute_stats(None).count == 0

    def test_type_counts_bounded_by_count(self, mixed_transactions, transaction_factory):
        transactions = mixed_transactions + [transaction_factory(4000, property_type=PropertyType.OTHER)]
        stats = compute_stats(transactions)
        assert stats.house_count + stats.apartment_count <= stats.count
        assert stats.count == 6


class TestGrouping:
    """Test per-territory grouping"""

    def test_stats_by_department(self, mixed_transactions):
        by_dept = compute_stats_by_dept(mixed_transactions)

        assert set(by_dept) == {'75', '92'}
        assert by_dept['75'].count == 3
        assert by_dept['75'].median_price == 9000
        assert by_dept['92'].count == 2
        assert by_dept['92'].median_price == 6500
        assert by_dept['92'].house_median_price is None

    def test_median_by_commune(self, mixed_transactions):
        medians = aggregate_median_by_key(mixed_transactions, 'commune')
        assert medians == {'75056': 9000, '92012': 6500}

    def test_median_by_section(self, mixed_transactions):
        medians = aggregate_median_by_key(mixed_transactions, TerritoryScale.SECTION)
        assert medians == {'75056000AB': 9000, '92012000AC': 6500}

    def test_unknown_key_rejected(self, paris_transactions):
        with pytest.raises(ValueError):
            aggregate_median_by_key(paris_transactions, 'region')

    def test_indexes_keep_unusable_records(self, mixed_transactions):
        index = build_indexes(mixed_transactions)

        assert len(index.get('commune', '92012')) == 3
        assert len(index.get(TerritoryScale.SECTION, '92012000AD')) == 1
        assert len(index.by_department['93']) == 1
        assert index.get('commune', '99999') == ()

    def test_transaction_without_section_not_indexed_by_section(self, transaction_factory):
        index = build_indexes([transaction_factory(5000, section=None)])
        assert index.by_section == {}
        assert len(index.by_commune['75056']) == 1

    def test_indexes_are_read_only(self, paris_transactions):
        index = build_indexes(paris_transactions)

        with pytest.raises(TypeError):
            index.by_commune['75056'] = ()
        with pytest.raises(TypeError):
            index.for_scale('section')['75056000ZZ'] = ()
        assert len(index.get('commune', '75056')) == 3


class TestTransactionAggregator:
    """Test the aggregation bundle"""

    def test_aggregate(self, mixed_transactions):
        data = TransactionAggregator().aggregate(mixed_transactions)

        assert data.transaction_count == 7
        assert data.usable_count == 5
        assert data.prices_for('department') == {'75': 9000, '92': 6500}
        assert data.prices_for(TerritoryScale.COMMUNE)['75056'] == 9000
        assert data.stats_for('commune', '75056').count == 3

    def test_price_maps_are_copies(self, mixed_transactions):
        data = TransactionAggregator().aggregate(mixed_transactions)

        prices = data.prices_for('commune')
        prices['75056'] = 1
        prices.pop('92012')
        assert data.median_by_commune['75056'] == 9000
        assert data.prices_for('commune')['92012'] == 6500
        assert data.stats_for('commune', 'unknown').count == 0

    def test_aggregate_empty(self):
        data = TransactionAggregator().aggregate([])
        assert data.transaction_count == 0
        assert data.stats_by_department == {}
        assert data.median_by_commune == {}

    def test_stats_frame(self, mixed_transactions):
        data = TransactionAggregator().aggregate(mixed_transactions)
        frame = data.stats_frame('commune')

        assert list(frame['code']) == ['75056', '92012', '93066']
        assert 'median_price' in frame.columns
        paris = frame[frame['code'] == '75056'].iloc[0]
        assert paris['count'] == 3
        assert paris['median_price'] == 9000

    def test_aggregation_is_idempotent(self, mixed_transactions):
        aggregator = TransactionAggregator()
        first = aggregator.aggregate(mixed_transactions)
        second = aggregator.aggregate(mixed_transactions)
        assert first.median_by_commune == second.median_by_commune
        assert first.stats_by_department == second.stats_by_department

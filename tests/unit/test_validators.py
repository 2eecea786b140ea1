"""Unit tests for data validators"""

import pytest
import pandas as pd

from dvf_explorer.models.validators import DataValidator


class TestDataValidator:
    """Test data validation functions"""

    def test_validate_transaction_batch(self, dvf_records_df):
        """Test batch validation of DVF rows"""
        validated_df = DataValidator.validate_transaction_batch(dvf_records_df)

        # Check added columns
        for column in ('is_valid', 'rejection_reason', 'valid_surface', 'valid_value', 'valid_commune'):
            assert column in validated_df.columns

        assert list(validated_df['is_valid']) == [True, False, False, False]
        assert list(validated_df['rejection_reason']) == [
            '', 'Invalid sale value', 'Invalid built surface', 'Missing commune code'
        ]

    def test_rows_preserved(self, dvf_records_df):
        validated_df = DataValidator.validate_transaction_batch(dvf_records_df)
        assert len(validated_df) == len(dvf_records_df)
        assert 'is_valid' not in dvf_records_df.columns

    def test_price_per_m2(self, dvf_records_df):
        validated_df = DataValidator.validate_transaction_batch(dvf_records_df)
        assert validated_df.loc[0, 'price_per_m2'] == 8000
        assert pd.isna(validated_df.loc[2, 'price_per_m2'])

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="Missing columns"):
            DataValidator.validate_transaction_batch(pd.DataFrame({'code_commune': ['75056']}))

    def test_generate_validation_report(self, dvf_records_df):
        report = DataValidator.generate_validation_report(dvf_records_df)

        assert report['total_transactions'] == 4
        assert report['valid_transactions'] == 1
        assert report['invalid_transactions'] == 3
        assert report['validation_rate'] == 0.25
        assert report['rejection_reasons']['Invalid sale value'] == 1
        assert report['price_per_m2_stats']['median'] == 8000
        assert report['communes'] == 1

    def test_report_on_empty_frame(self):
        df = pd.DataFrame(columns=DataValidator.REQUIRED_COLUMNS)
        report = DataValidator.generate_validation_report(df)

        assert report['total_transactions'] == 0
        assert report['validation_rate'] == 0.0
        assert report['price_per_m2_stats']['median'] is None

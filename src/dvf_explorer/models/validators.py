"""Data validation functions"""

import pandas as pd
import numpy as np


class DataValidator:
    """Centralized validation of raw DVF rows"""

    REQUIRED_COLUMNS = ['code_commune', 'valeur_fonciere', 'surface_reelle_bati']

    @classmethod
    def validate_transaction_batch(cls, transactions_df: pd.DataFrame) -> pd.DataFrame:
        """
        Validate a batch of DVF rows and add validation flags

        Rows failing a check stay in the output; only the flags change.

        Returns DataFrame with added validation columns
        """
        df = transactions_df.copy()

        missing = [col for col in cls.REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise ValueError(f"Missing columns: {missing}")

        value = pd.to_numeric(df['valeur_fonciere'], errors='coerce')
        surface = pd.to_numeric(df['surface_reelle_bati'], errors='coerce')
        commune = df['code_commune'].astype('string').str.strip()

        df['price_per_m2'] = np.where(surface > 0, value / surface.where(surface > 0), np.nan)

        # Apply filters
        df['valid_commune'] = (commune.notna() & (commune.str.len() > 0)).fillna(False).astype(bool)
        df['valid_surface'] = (surface > 0).astype(bool)
        df['valid_value'] = (value > 0).astype(bool)

        df['is_valid'] = df['valid_commune'] & df['valid_surface'] & df['valid_value']

        # Add rejection reason, the last failing check wins
        df['rejection_reason'] = ''
        df.loc[~df['valid_value'], 'rejection_reason'] = 'Invalid sale value'
        df.loc[~df['valid_surface'], 'rejection_reason'] = 'Invalid built surface'
        df.loc[~df['valid_commune'], 'rejection_reason'] = 'Missing commune code'

        return df

    @classmethod
    def generate_validation_report(cls, transactions_df: pd.DataFrame) -> dict:
        """Generate comprehensive validation report"""
        validated_df = cls.validate_transaction_batch(transactions_df)
        valid = validated_df[validated_df['is_valid']]

        report = {
            'total_transactions': int(len(validated_df)),
            'valid_transactions': int(validated_df['is_valid'].sum()),
            'invalid_transactions': int((~validated_df['is_valid']).sum()),
            'validation_rate': float(validated_df['is_valid'].mean()) if len(validated_df) else 0.0,
            'rejection_reasons': {
                str(k): int(v) for k, v in
                validated_df.loc[~validated_df['is_valid'], 'rejection_reason'].value_counts().items()
            },
            'price_per_m2_stats': {
                'mean': _maybe_float(valid['price_per_m2'].mean()),
                'median': _maybe_float(valid['price_per_m2'].median()),
                'min': _maybe_float(valid['price_per_m2'].min()),
                'max': _maybe_float(valid['price_per_m2'].max())
            },
            'communes': int(valid['code_commune'].nunique())
        }

        return report


def _maybe_float(value):
    return None if pd.isna(value) else float(value)

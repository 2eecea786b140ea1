#!/usr/bin/env python3
"""Script to generate a synthetic DVF dataset for local exploration"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from dvf_explorer.aggregation import TransactionAggregator
from dvf_explorer.data import SyntheticDataGenerator
from dvf_explorer.models import transactions_from_dataframe
from dvf_explorer.models.validators import DataValidator


def main():
    """Generate complete test dataset"""
    print("DVF Explorer Test Data Generator")
    print("=" * 50)

    output_dir = Path(__file__).parent.parent / 'data' / 'test'

    print("\nGenerating sales, boundaries and transit network...")
    generator = SyntheticDataGenerator(seed=42)
    dataset = generator.generate_complete_dataset(
        num_transactions=20000,
        start_year=2018,
        end_year=2023,
        num_sections=6,
    )

    print("\nValidating sales...")
    report = DataValidator.generate_validation_report(dataset['transactions'])
    print(f"  Total sales: {report['total_transactions']:,}")
    print(f"  Valid sales: {report['valid_transactions']:,}")
    print(f"  Validation rate: {report['validation_rate']:.1%}")

    print("\nSaving data files...")
    paths = generator.save_dataset(dataset, output_dir)
    for name, path in paths.items():
        print(f"  {name}: {path.name}")

    # Print summary statistics
    data = TransactionAggregator().aggregate(transactions_from_dataframe(dataset['transactions']))
    print("\nMedian price per m² by department:")
    for code, stats in sorted(data.stats_by_department.items()):
        print(f"  {code}: {stats.median_price:,.0f} € ({stats.count:,} sales)")

    print(f"\nData saved to: {output_dir}")


if __name__ == '__main__':
    main()

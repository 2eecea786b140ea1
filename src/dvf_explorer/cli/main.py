"""Main CLI entry point for the DVF explorer"""

import click
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any

from ..aggregation import TransactionAggregator
from ..algorithms.statistics import format_euro
from ..algorithms.transit_matcher import group_lines_by_mode
from ..config import ExplorerSettings, load_config
from ..data import DataLoader, SyntheticDataGenerator
from ..models import DataValidator, Territory, TerritoryScale, territories_by_code
from ..session import ExplorationSession


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('dvf-cli')


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='Configuration file path')
@click.option('--debug/--no-debug', default=False, help='Enable debug mode')
@click.pass_context
def cli(ctx, config: Optional[str], debug: bool):
    """DVF Île-de-France explorer command line interface"""
    ctx.ensure_object(dict)

    # Load configuration
    ctx.obj['config'] = load_config(config)

    # Set debug mode
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        ctx.obj['debug'] = True


@cli.command()
@click.option('--data-dir', '-d', type=click.Path(exists=True, file_okay=False), help='Data directory path')
@click.option('--scale', '-s', type=click.Choice([s.value for s in TerritoryScale]), default='department')
@click.option('--format', '-f', type=click.Choice(['text', 'json', 'csv']), default='text', help='Output format')
@click.option('--output', '-o', type=click.Path(), help='Output file')
@click.pass_context
def summary(ctx, data_dir: Optional[str], scale: str, format: str, output: Optional[str]):
    """Price statistics per territory"""
    settings = _settings(ctx)
    loader = DataLoader(data_dir or settings.data_dir)

    transactions = loader.load_transactions(settings.transactions_file)
    data = TransactionAggregator().aggregate(transactions)
    frame = data.stats_frame(scale)

    if format == 'json':
        text = frame.to_json(orient='records', force_ascii=False)
    elif format == 'csv':
        text = frame.to_csv(index=False)
    else:
        text = _format_summary_text(frame, scale, data.transaction_count, data.usable_count)

    _emit(text, output)


@cli.command()
@click.option('--input', '-i', 'input_file', type=click.Path(exists=True, dir_okay=False), required=True,
              help='Input DVF file')
@click.option('--output', '-o', type=click.Path(), help='Output report file')
@click.option('--format', '-f', type=click.Choice(['text', 'json']), default='text')
@click.pass_context
def quality(ctx, input_file: str, output: Optional[str], format: str):
    """Analyze data quality and generate report"""
    logger.info(f"Analyzing data quality for {input_file}")

    path = Path(input_file)
    df = DataLoader(path.parent).load_transactions_frame(path.name)

    try:
        report = DataValidator.generate_validation_report(df)
    except ValueError as e:
        raise click.ClickException(str(e))

    if format == 'json':
        report_text = json.dumps(report, indent=2, default=str)
    else:
        report_text = _format_quality_report_text(report)

    _emit(report_text, output)


@cli.command()
@click.option('--budget', '-b', type=float, required=True, help='Budget in euros')
@click.option('--department', type=str, help='Restrict to the communes of a department')
@click.option('--commune', type=str, help='Rank the sections of a commune')
@click.option('--top', '-n', type=int, help='Number of results')
@click.option('--data-dir', '-d', type=click.Path(exists=True, file_okay=False), help='Data directory path')
@click.pass_context
def affordability(ctx, budget: float, department: Optional[str], commune: Optional[str],
                  top: Optional[int], data_dir: Optional[str]):
    """Territories where a budget buys the most surface"""
    if budget <= 0:
        raise click.BadParameter("budget must be positive", param_hint="'--budget'")

    settings = _settings(ctx)
    session = _open_session(settings, DataLoader(data_dir or settings.data_dir))

    if commune:
        communes = territories_by_code(session.communes)
        target = communes.get(commune) or Territory(
            code=commune, name=commune, scale=TerritoryScale.COMMUNE, parent_code=commune[:2]
        )
        session.select_territory(target)
    elif department:
        session.select_territory(
            Territory(code=department, name=department, scale=TerritoryScale.DEPARTMENT)
        )

    results = session.analyze_budget(budget, top if top is not None else settings.top_n)
    if not results:
        click.echo("No territory with a known price in this area")
        return

    click.echo(f"Budget: {format_euro(budget)}")
    for rank, result in enumerate(results, start=1):
        click.echo(
            f"{rank}. {result.name} ({result.id}): {result.affordable_surface} m² "
            f"at {format_euro(result.price_per_m2)}/m²"
        )


@cli.command()
@click.option('--commune', required=True, type=str, help='Commune code')
@click.option('--radius', '-r', type=float, help='Serving radius in meters')
@click.option('--data-dir', '-d', type=click.Path(exists=True, file_okay=False), help='Data directory path')
@click.pass_context
def serving(ctx, commune: str, radius: Optional[float], data_dir: Optional[str]):
    """Transit lines serving a commune"""
    if radius is not None and radius < 0:
        raise click.BadParameter("radius cannot be negative", param_hint="'--radius'")

    settings = _settings(ctx)
    if radius is not None:
        settings.serving_radius_m = radius
    loader = DataLoader(data_dir or settings.data_dir)
    session = _open_session(settings, loader, with_transactions=False)

    target = territories_by_code(session.communes).get(commune)
    if target is None:
        raise click.ClickException(f"Commune {commune} not found in {settings.communes_file}")

    lines = session.transit_for(target)
    click.echo(f"{target.name} ({target.code}): {len(lines)} lines")
    for mode, line_colors in group_lines_by_mode(lines).items():
        click.echo(f"  {mode.value}: {', '.join(line_colors)}")


@cli.command()
@click.option('--output', '-o', type=click.Path(), required=True, help='Output directory')
@click.option('--num-transactions', default=1000, type=int, help='Number of sales')
@click.option('--start-year', default=2020, type=int, help='Start year')
@click.option('--end-year', default=2023, type=int, help='End year')
@click.option('--seed', default=42, type=int, help='Random seed')
@click.pass_context
def generate(ctx, output: str, num_transactions: int, start_year: int, end_year: int, seed: int):
    """Generate synthetic test data"""
    if start_year > end_year:
        raise click.BadParameter("start year is after end year", param_hint="'--start-year'")

    logger.info("Generating synthetic data")

    generator = SyntheticDataGenerator(seed=seed)
    dataset = generator.generate_complete_dataset(
        num_transactions=num_transactions,
        start_year=start_year,
        end_year=end_year,
    )
    paths = generator.save_dataset(dataset, output)

    # Save metadata
    metadata = {
        'generated_at': datetime.now().isoformat(),
        'num_transactions': num_transactions,
        'seed': seed,
        'date_range': f"{start_year}-{end_year}",
        'files': {name: path.name for name, path in paths.items()},
    }

    with open(Path(output) / 'metadata.json', 'w') as f:
        json.dump(metadata, f, indent=2)

    logger.info(f"Generated {num_transactions} transactions")
    logger.info(f"Data saved to {output}")


def _settings(ctx) -> ExplorerSettings:
    return ctx.obj.get('config') or ExplorerSettings()


def _open_session(settings: ExplorerSettings,
                  loader: DataLoader,
                  with_transactions: bool = True) -> ExplorationSession:
    """Load whatever source files are present and open a session"""
    transactions = loader.load_transactions(settings.transactions_file) if with_transactions else []

    stops = loader.load_stops(settings.stops_file) if loader.find(settings.stops_file) else []
    lines = loader.load_transit_lines(settings.transit_lines_file) if loader.find(settings.transit_lines_file) else []

    communes = []
    if loader.find(settings.communes_file):
        communes = loader.load_territories(settings.communes_file, TerritoryScale.COMMUNE)
    else:
        logger.warning(f"No commune boundaries found ({settings.communes_file})")

    sections = []
    if loader.find(settings.sections_file):
        sections = loader.load_territories(settings.sections_file, TerritoryScale.SECTION)

    return ExplorationSession(
        TransactionAggregator().aggregate(transactions),
        stops=stops,
        lines=lines,
        communes=communes,
        sections=sections,
        serving_radius_m=settings.serving_radius_m,
    )


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding='utf-8')
        logger.info(f"Report saved to {output}")
    else:
        click.echo(text)


def _format_summary_text(frame, scale: str, total: int, usable: int) -> str:
    """Format per-territory statistics as text"""
    lines = [
        f"Price statistics by {scale}",
        "=" * 50,
        f"Transactions: {total} ({usable} with surface and value)",
        "",
    ]

    for row in frame.to_dict(orient='records'):
        lines.append(
            f"  {row['code']}: {row['count']} sales, median {format_euro(row['median_price'])}/m² "
            f"({row['house_count']} houses, {row['apartment_count']} apartments)"
        )

    return "\n".join(lines)


def _format_quality_report_text(report: Dict[str, Any]) -> str:
    """Format quality report as text"""
    lines = [
        "Data Quality Report",
        "=" * 50,
        f"Total Transactions: {report['total_transactions']}",
        f"Valid Transactions: {report['valid_transactions']}",
        f"Invalid Transactions: {report['invalid_transactions']}",
        f"Validation Rate: {report['validation_rate']:.1%}",
        "",
        "Rejection Reasons:",
        "-" * 30,
    ]

    for reason, count in report['rejection_reasons'].items():
        lines.append(f"  {reason}: {count}")

    stats = report['price_per_m2_stats']
    lines.extend([
        "",
        "Price per m²:",
        "-" * 30,
        f"  Median: {format_euro(stats['median'])}",
        f"  Min: {format_euro(stats['min'])}",
        f"  Max: {format_euro(stats['max'])}",
        f"  Communes: {report['communes']}",
    ])

    return "\n".join(lines)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
NYPD Shooting Incident Report - Main Pipeline
=============================================

Builds the shooting incident report from the public NYPD dataset.

Phases:
    1. Load - Download (or read) the incident CSV
    2. Clean - Parse types, drop irrelevant columns and incomplete rows
    3. Aggregate - Daily, borough, monthly and hourly counts
    4. Model - Least-squares fit of monthly counts per borough
    5. Report - Charts, fit metrics and the Markdown report

Usage:
    # Run complete pipeline against the live dataset
    python main.py

    # Use a local copy of the CSV
    python main.py --data data/raw/NYPD_Shooting_Incident_Data.csv

    # Stop after a phase
    python main.py --phase aggregate
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from shooting_report.data_loader import (
    DEFAULT_TIMEOUT, DEFAULT_URL, fetch_data, load_config, load_data, print_data_summary,
    validate_data,
)
from shooting_report.cleaning import clean_incidents, summarize_cleaning, print_cleaning_summary
from shooting_report.aggregation import build_aggregates, print_aggregation_summary
from shooting_report.model import fit_monthly_model, with_predictions, print_model_summary
from shooting_report.evaluation import evaluate_fit, print_evaluation_report
from shooting_report.visualization import generate_figures
from shooting_report.report import build_report, write_report

PHASES = ['clean', 'aggregate', 'model', 'all']


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the pipeline."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(f'pipeline_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log')
        ]
    )


def run_load(data_path: Optional[str], config: Dict[str, Any]) -> pd.DataFrame:
    """
    Execute Phase 1: read the raw incident table.

    Args:
        data_path: Local CSV to use instead of downloading (optional)
        config: Configuration dictionary

    Returns:
        Raw DataFrame
    """
    print("\n" + "=" * 70)
    print("PHASE 1: LOAD")
    print("=" * 70)

    data_config = config.get('data', {})

    if data_path:
        df = load_data(data_path)
    else:
        df = fetch_data(
            url=data_config.get('url', DEFAULT_URL),
            timeout=data_config.get('timeout', DEFAULT_TIMEOUT)
        )

    print_data_summary(df)

    is_valid, _ = validate_data(df, strict=False)
    if not is_valid:
        print("⚠️  Rows with missing or unknown values will be dropped during cleaning.")

    return df


def run_cleaning(raw: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Phase 2: produce the cleaned incident table.

    Args:
        raw: Raw DataFrame
        config: Configuration dictionary

    Returns:
        Dictionary with the cleaned table and its diagnostic summary
    """
    print("\n" + "=" * 70)
    print("PHASE 2: CLEANING")
    print("=" * 70)

    drop_columns = config.get('data', {}).get('drop_columns')
    strict = config.get('cleaning', {}).get('strict', False)

    cleaned = clean_incidents(raw, drop_columns=drop_columns, strict=strict)
    summary = summarize_cleaning(raw, cleaned, drop_columns=drop_columns)
    print_cleaning_summary(summary)

    return {'cleaned': cleaned, 'summary': summary}


def run_aggregation(cleaned: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Execute Phase 3: compute the aggregate views.

    Args:
        cleaned: Cleaned incident table

    Returns:
        Dictionary from build_aggregates
    """
    print("\n" + "=" * 70)
    print("PHASE 3: AGGREGATION")
    print("=" * 70)

    aggregates = build_aggregates(cleaned)
    print_aggregation_summary(aggregates)

    return aggregates


def run_modeling(aggregates: Dict[str, pd.DataFrame], config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Phase 4: fit the model and evaluate it.

    Args:
        aggregates: Dictionary from build_aggregates
        config: Configuration dictionary

    Returns:
        Dictionary with the model, the predicted table and evaluation results
    """
    print("\n" + "=" * 70)
    print("PHASE 4: MODEL")
    print("=" * 70)

    output_config = config.get('output', {})
    monthly = aggregates['monthly_by_region']

    model = fit_monthly_model(monthly, save_path=output_config.get('model_path'))
    print_model_summary(model)

    predicted = with_predictions(monthly, model)
    evaluation = evaluate_fit(predicted, output_dir=output_config.get('reports_path', 'reports/'))
    print_evaluation_report(evaluation['metrics'])

    return {'model': model, 'predicted': predicted, 'evaluation': evaluation}


def run_report(
    cleaning: Dict[str, Any],
    aggregates: Dict[str, pd.DataFrame],
    modeling: Dict[str, Any],
    config: Dict[str, Any]
) -> str:
    """
    Execute Phase 5: render charts and write the report.

    Args:
        cleaning: Result of run_cleaning
        aggregates: Result of run_aggregation
        modeling: Result of run_modeling
        config: Configuration dictionary

    Returns:
        Path to the written report
    """
    print("\n" + "=" * 70)
    print("PHASE 5: REPORT")
    print("=" * 70)

    output_config = config.get('output', {})
    reports_path = Path(output_config.get('reports_path', 'reports/'))
    figures_path = reports_path / "figures"

    figures = generate_figures(aggregates, str(figures_path), modeling['predicted'])
    figures += modeling['evaluation']['figures']

    model = modeling['model']
    text = build_report(
        cleaning['summary'],
        aggregates,
        figures,
        figures_dir="figures",
        coefficients=model.coefficients(),
        metrics=modeling['evaluation']['metrics'],
        reference_region=model.reference_region_
    )
    report_path = write_report(text, str(reports_path / "report.md"))

    print(f"\n✓ Report written to {report_path} with {len(figures)} figures")
    return report_path


def run_pipeline(
    data_path: Optional[str] = None,
    config_path: str = "config/config.yaml",
    phase: str = "all",
    log_level: Optional[str] = None
) -> Dict[str, Any]:
    """
    Execute the pipeline up to and including the requested phase.

    Args:
        data_path: Local CSV to use instead of downloading (optional)
        config_path: Path to configuration file
        phase: Last phase to run ('clean', 'aggregate', 'model', 'all')
        log_level: Overrides the configured logging level

    Returns:
        Dictionary containing the results of every phase that ran
    """
    if phase not in PHASES:
        raise ValueError(f"Unknown phase: {phase}. Choose from: {', '.join(PHASES)}")

    config = load_config(config_path)
    setup_logging(log_level or config.get('logging', {}).get('level', 'INFO'))

    print("\n" + "=" * 70)
    print("NYPD SHOOTING INCIDENT REPORT")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70)

    results = {'config': config}

    raw = run_load(data_path, config)
    results['cleaning'] = run_cleaning(raw, config)
    if phase == 'clean':
        return results

    results['aggregates'] = run_aggregation(results['cleaning']['cleaned'])
    if phase == 'aggregate':
        return results

    results['modeling'] = run_modeling(results['aggregates'], config)
    if phase == 'model':
        return results

    results['report_path'] = run_report(
        results['cleaning'], results['aggregates'], results['modeling'], config
    )

    print("\n" + "=" * 70)
    print("PIPELINE COMPLETE")
    print("=" * 70)
    print(f"  • Records: {results['cleaning']['summary']['rows_after']} cleaned "
          f"of {results['cleaning']['summary']['rows_before']}")
    print(f"  • Report: {results['report_path']}")
    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70 + "\n")

    return results


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="NYPD Shooting Incident analysis report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --data data/raw/NYPD_Shooting_Incident_Data.csv
  python main.py --phase aggregate
        """
    )

    parser.add_argument(
        '--data', '-d',
        type=str,
        default=None,
        help='Local CSV to use instead of downloading the dataset'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=PHASES,
        default='all',
        help='Last phase to run (default: all)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    if args.data and not Path(args.data).exists():
        print(f"Error: Data file not found: {args.data}")
        sys.exit(1)

    if not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        sys.exit(1)

    try:
        run_pipeline(
            args.data,
            args.config,
            args.phase,
            log_level='DEBUG' if args.verbose else None
        )
        return 0

    except Exception as e:
        logging.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

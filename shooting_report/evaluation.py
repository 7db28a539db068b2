"""
Model Evaluation Module
=======================

Describes how closely the fitted model tracks the observed monthly counts.

Features:
    - RMSE, MAE, R² overall and per region
    - Residual distribution plots
    - Metrics saved as JSON
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from scipy import stats
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score

logger = logging.getLogger(__name__)


def _score(actual: np.ndarray, predicted: np.ndarray) -> Dict[str, Any]:
    # R² is undefined for a single point; stored as null
    r2 = float(r2_score(actual, predicted)) if len(actual) > 1 else None
    if r2 is not None and not np.isfinite(r2):
        r2 = None
    return {
        'rmse': float(np.sqrt(mean_squared_error(actual, predicted))),
        'mae': float(mean_absolute_error(actual, predicted)),
        'r2': r2,
        'mean_error': float(np.mean(actual - predicted)),
        'max_error': float(np.max(np.abs(actual - predicted))),
        'n_samples': int(len(actual)),
    }


def format_r2(r2: Optional[float], digits: int = 4) -> str:
    """Format R², which is None when it is undefined."""
    return "n/a" if r2 is None else f"{r2:.{digits}f}"


def calculate_fit_metrics(predicted_monthly: pd.DataFrame) -> Optional[Dict[str, Any]]:
    """
    Calculate fit metrics overall and for each region.

    Rows without a prediction are ignored.

    Args:
        predicted_monthly: Output of with_predictions

    Returns:
        Dictionary with 'overall' and 'per_region' metrics, or None when
        no row has a prediction
    """
    scored = predicted_monthly.dropna(subset=["predicted"])
    if scored.empty:
        logger.warning("No predictions available; skipping fit metrics")
        return None

    actual = scored["incidents"].to_numpy(dtype=float)
    predicted = scored["predicted"].to_numpy(dtype=float)

    metrics = {
        'overall': _score(actual, predicted),
        'per_region': {}
    }

    for region, group in scored.groupby("region", observed=True):
        metrics['per_region'][str(region)] = _score(
            group["incidents"].to_numpy(dtype=float),
            group["predicted"].to_numpy(dtype=float)
        )

    return metrics


def plot_residuals(
    predicted_monthly: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Create a residual distribution plot for model diagnostics.

    Args:
        predicted_monthly: Output of with_predictions
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    scored = predicted_monthly.dropna(subset=["predicted"])
    residuals = scored["incidents"] - scored["predicted"]

    fig, ax = plt.subplots(figsize=figsize)

    varied = residuals.nunique() > 1
    sns.histplot(residuals, kde=varied, ax=ax, bins=30, alpha=0.7)
    ax.axvline(0, color='red', linestyle='--', linewidth=2, label='Zero')

    title = 'Residuals (Actual - Predicted)'
    if varied and len(residuals) >= 8:
        # normaltest needs at least 8 observations
        _, p_value = stats.normaltest(residuals)
        title += f', normality p={p_value:.3f}'

    ax.set_xlabel('Residual (incidents)')
    ax.set_ylabel('Frequency')
    ax.set_title(title, fontsize=12, fontweight='bold')
    ax.legend(fontsize=8)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Residuals plot saved to {save_path}")

    return fig


def evaluate_fit(
    predicted_monthly: pd.DataFrame,
    output_dir: str = "reports/"
) -> Dict[str, Any]:
    """
    Compute fit metrics, save them as JSON and plot residuals.

    Args:
        predicted_monthly: Output of with_predictions
        output_dir: Directory for output files

    Returns:
        Dictionary containing metrics and file paths
    """
    output_dir = Path(output_dir)
    figures_dir = output_dir / "figures"
    metrics_dir = output_dir / "metrics"

    figures_dir.mkdir(parents=True, exist_ok=True)
    metrics_dir.mkdir(parents=True, exist_ok=True)

    logger.info("=" * 60)
    logger.info("EVALUATING MODEL FIT")
    logger.info("=" * 60)

    metrics = calculate_fit_metrics(predicted_monthly)

    metrics_file = metrics_dir / "fit_metrics.json"
    with open(metrics_file, 'w') as f:
        json.dump(metrics, f, indent=2, allow_nan=False)
    logger.info(f"Metrics saved to {metrics_file}")

    figures = []
    if metrics is not None:
        plot_residuals(
            predicted_monthly,
            save_path=str(figures_dir / "06_residuals.png")
        )
        figures.append("06_residuals.png")
        plt.close('all')

        logger.info(f"  RMSE: {metrics['overall']['rmse']:.4f}")
        logger.info(f"  MAE: {metrics['overall']['mae']:.4f}")
        logger.info(f"  R²: {format_r2(metrics['overall']['r2'])}")

    return {
        'metrics': metrics,
        'figures': figures,
        'metrics_file': str(metrics_file)
    }


def print_evaluation_report(metrics: Optional[Dict[str, Any]]) -> None:
    """
    Print a formatted evaluation report to console.

    Args:
        metrics: Metrics dictionary from calculate_fit_metrics
    """
    print("\n" + "=" * 70)
    print("MODEL FIT REPORT")
    print("=" * 70)

    if metrics is None:
        print("No predictions available (degenerate fit).")
        print("=" * 70 + "\n")
        return

    print(f"{'Region':<15} {'RMSE':<12} {'MAE':<12} {'R²':<12} {'Months':<8}")
    print("-" * 70)
    for region, m in metrics['per_region'].items():
        print(f"{region:<15} {m['rmse']:<12.4f} {m['mae']:<12.4f} "
              f"{format_r2(m['r2']):<12} {m['n_samples']:<8}")
    print("-" * 70)

    overall = metrics['overall']
    print(f"  • RMSE: {overall['rmse']:.4f}")
    print(f"  • MAE: {overall['mae']:.4f}")
    print(f"  • R²: {format_r2(overall['r2'])}")
    print(f"  • Rows evaluated: {overall['n_samples']}")
    print("=" * 70 + "\n")

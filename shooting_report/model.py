"""
Model Module
============

Ordinary least-squares fit of monthly incident counts.

The response is the monthly incident count of one region; the predictors
are the month as a continuous ordinal and the region as one-hot dummies
with the first region present absorbed into the intercept.

Features:
    - Single full-data fit, no split and no regularization
    - Degenerate fits (fewer rows than parameters) yield NaN predictions
    - Model persistence (save/load)
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

import joblib
import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from .cleaning import Borough

logger = logging.getLogger(__name__)


def month_ordinal(months: pd.Series) -> np.ndarray:
    """Months elapsed since year 0: year * 12 + month - 1."""
    months = pd.to_datetime(months)
    return (months.dt.year * 12 + months.dt.month - 1).to_numpy(dtype=float)


class MonthlyIncidentModel:
    """
    Linear model of monthly incidents per region.

    Wraps scikit-learn's LinearRegression; collinear designs fall back to
    the solver's minimum-norm least-squares solution.
    """

    def __init__(self):
        self.model: Optional[LinearRegression] = None
        self.regions_: Optional[List[str]] = None
        self.reference_region_: Optional[str] = None
        self.n_samples_: Optional[int] = None
        self.degenerate_ = False
        self.training_info: Dict[str, Any] = {}
        self._is_fitted = False

    @property
    def n_parameters(self) -> int:
        """Free parameters: intercept, month slope and one dummy per non-reference region."""
        if self.regions_ is None:
            raise ValueError("Model must be fitted first.")
        return len(self.regions_) + 1

    def design_matrix(self, monthly: pd.DataFrame) -> np.ndarray:
        """
        Build the predictor matrix for a monthly-by-region table.

        Args:
            monthly: DataFrame with month and region columns

        Returns:
            Array of shape (n_rows, n_regions) with the month ordinal
            followed by one dummy column per non-reference region
        """
        if self.regions_ is None:
            raise ValueError("Model must be fitted first.")

        regions = monthly["region"].astype(str)
        unseen = sorted(set(regions) - set(self.regions_))
        if unseen:
            raise ValueError(f"Regions not seen during fit: {unseen}")

        columns = [month_ordinal(monthly["month"])]
        for region in self.regions_[1:]:
            columns.append((regions == region).to_numpy(dtype=float))

        return np.column_stack(columns)

    def fit(self, monthly: pd.DataFrame) -> 'MonthlyIncidentModel':
        """
        Fit the regression on the full monthly-by-region table.

        Args:
            monthly: DataFrame with month, region and incidents columns

        Returns:
            Self for method chaining
        """
        present = set(monthly["region"].astype(str))
        ordered = [r for r in Borough.values() if r in present]
        self.regions_ = ordered + sorted(present - set(ordered))
        self.reference_region_ = self.regions_[0] if self.regions_ else None
        self.n_samples_ = len(monthly)
        self.model = None

        logger.info("=" * 60)
        logger.info("FITTING MONTHLY INCIDENT MODEL")
        logger.info("=" * 60)
        logger.info(f"Rows: {self.n_samples_}, regions: {self.regions_}")

        self.degenerate_ = self.n_samples_ < self.n_parameters
        if self.degenerate_:
            logger.warning(
                f"Only {self.n_samples_} rows for {self.n_parameters} parameters; "
                "model left unfit and predictions will be undefined"
            )
        else:
            X = self.design_matrix(monthly)
            y = monthly["incidents"].to_numpy(dtype=float)
            self.model = LinearRegression()
            self.model.fit(X, y)

        self.training_info = {
            'n_samples': self.n_samples_,
            'n_parameters': self.n_parameters,
            'regions': list(self.regions_),
            'reference_region': self.reference_region_,
            'degenerate': self.degenerate_,
            'trained_at': datetime.now().isoformat(),
        }
        self._is_fitted = True

        if not self.degenerate_:
            logger.info(f"Month slope: {self.model.coef_[0]:.4f} incidents/month")
        return self

    def predict(self, monthly: pd.DataFrame) -> np.ndarray:
        """
        Predicted incident count for every row of a monthly-by-region table.

        Args:
            monthly: DataFrame with month and region columns

        Returns:
            Array of predictions, all NaN when the fit was degenerate
        """
        if not self._is_fitted:
            raise ValueError("Model must be fitted before prediction. Call fit() first.")

        X = self.design_matrix(monthly)
        if self.degenerate_:
            return np.full(len(X), np.nan)
        return self.model.predict(X)

    def coefficients(self) -> Dict[str, float]:
        """
        Fitted coefficients by name.

        Returns:
            Dictionary with intercept, month and region_<name> entries;
            empty when the fit was degenerate
        """
        if not self._is_fitted:
            raise ValueError("Model must be fitted first.")
        if self.degenerate_:
            return {}

        coefs = {
            'intercept': float(self.model.intercept_),
            'month': float(self.model.coef_[0]),
        }
        for region, value in zip(self.regions_[1:], self.model.coef_[1:]):
            coefs[f"region_{region}"] = float(value)
        return coefs

    def save(self, filepath: str) -> None:
        """
        Save the fitted model to disk.

        Args:
            filepath: Path to save the model
        """
        if not self._is_fitted:
            raise ValueError("Cannot save unfitted model.")

        state = {
            'model': self.model,
            'regions_': self.regions_,
            'reference_region_': self.reference_region_,
            'n_samples_': self.n_samples_,
            'degenerate_': self.degenerate_,
            'training_info': self.training_info,
        }

        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(state, filepath)
        logger.info(f"Model saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> 'MonthlyIncidentModel':
        """
        Load a fitted model from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded MonthlyIncidentModel instance
        """
        state = joblib.load(filepath)

        model = cls()
        model.model = state['model']
        model.regions_ = state['regions_']
        model.reference_region_ = state['reference_region_']
        model.n_samples_ = state['n_samples_']
        model.degenerate_ = state['degenerate_']
        model.training_info = state['training_info']
        model._is_fitted = True

        logger.info(f"Model loaded from {filepath}")
        return model


def fit_monthly_model(
    monthly: pd.DataFrame,
    save_path: Optional[str] = None
) -> MonthlyIncidentModel:
    """
    Fit the monthly incident model.

    Args:
        monthly: Output of monthly_region_counts
        save_path: Path to save the fitted model (optional)

    Returns:
        Fitted MonthlyIncidentModel
    """
    model = MonthlyIncidentModel().fit(monthly)

    if save_path:
        model.save(save_path)

    return model


def with_predictions(monthly: pd.DataFrame, model: MonthlyIncidentModel) -> pd.DataFrame:
    """Copy of the monthly table with a predicted column added."""
    return monthly.assign(predicted=model.predict(monthly))


def print_model_summary(model: MonthlyIncidentModel) -> None:
    """
    Print a summary of the fitted model.

    Args:
        model: Fitted model instance
    """
    print("\n" + "=" * 50)
    print("MODEL SUMMARY")
    print("=" * 50)
    print("Model Type: LinearRegression (ordinary least squares)")
    print(f"Rows: {model.n_samples_}")
    print(f"Parameters: {model.n_parameters}")
    print(f"Reference region: {model.reference_region_}")

    if model.degenerate_:
        print("\nFit is degenerate: not enough rows for the parameters.")
    else:
        print("\nCoefficients:")
        for name, value in model.coefficients().items():
            print(f"  - {name}: {value:.4f}")

    print("=" * 50 + "\n")

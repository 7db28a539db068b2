"""
NYPD Shooting Incident Report
=============================

A reproducible analysis of the NYPD Shooting Incident dataset.

Modules:
    - data_loader: Dataset download, CSV ingestion and validation
    - cleaning: Type parsing, categorical normalization and row filtering
    - aggregation: Daily, regional, monthly and hourly incident counts
    - visualization: Descriptive charts
    - model: Ordinary least-squares fit of monthly counts
    - evaluation: Fit metrics and residual analysis
    - report: Markdown report generation
"""

__version__ = "1.0.0"
__author__ = "Shooting Report Team"

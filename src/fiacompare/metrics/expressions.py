"""
Polars expression guards for per-plot metric arithmetic.

Plots with no live trees (TPA = 0) and trees with no recorded diameter are
routine in FIA data, so the QMD ratio and root must never produce NaN, inf
or null.
"""

from __future__ import annotations

import polars as pl


def safe_divide(
    numerator: pl.Expr, denominator: pl.Expr, default: float = 0.0
) -> pl.Expr:
    """
    Divide ``numerator`` by ``denominator``, or ``default`` where it is 0 or null.

    Used for BAPA / TPA: a plot whose trees all lack an expansion factor has
    TPA 0 and therefore no mean basal area per tree.
    """
    nonzero = denominator.fill_null(0.0) != 0
    return pl.when(nonzero).then(numerator / denominator).otherwise(default)


def safe_sqrt(expr: pl.Expr, default: float = 0.0) -> pl.Expr:
    """Square root of ``expr``; null or negative values give ``default``."""
    usable = expr.is_not_null() & (expr >= 0)
    return pl.when(usable).then(expr.sqrt()).otherwise(default)


def null_safe_sum(expr: pl.Expr) -> pl.Expr:
    """Sum that treats nulls (and NaN) as zero contributions."""
    return expr.fill_nan(None).fill_null(0.0).sum()

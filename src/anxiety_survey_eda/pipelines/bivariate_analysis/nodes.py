from typing import Optional

import polars as pl
import structlog

from anxiety_survey_eda.density import kde_curve
from anxiety_survey_eda.exceptions import UnrecognizedVariableTypeError
from anxiety_survey_eda.schema import RESPONSE, RESPONSE_LEVELS, VariableType, classify
from anxiety_survey_eda.specs import PlotKind, PlotSpec, palette_color

log = structlog.get_logger(__name__)


def _response_domain(ds: pl.DataFrame, response: str, response_levels) -> pl.DataFrame:
    return pl.DataFrame(
        [pl.Series(response, list(response_levels), dtype=ds.schema[response])]
    )


def contingency_counts(
    ds: pl.DataFrame, col_name: str, response: str, response_levels
) -> pl.DataFrame:
    """Long-format cross-tab over every response level x observed predictor value.

    Combinations absent from the data are explicit zero counts.
    """
    grid = _response_domain(ds, response, response_levels).join(
        ds.select(pl.col(col_name).unique()), how="cross"
    )
    counts = ds.group_by([response, col_name]).len(name="count")

    return (
        grid.join(counts, on=[response, col_name], how="left")
        .with_columns(pl.col("count").fill_null(0).cast(pl.Int64))
        .sort([col_name, response])
    )


def grouped_box_stats(
    ds: pl.DataFrame, col_name: str, response: str, response_levels
) -> pl.DataFrame:
    """Tukey box statistics of a numeric predictor per response level.

    Every response level gets a row; empty levels have ``n = 0`` and null
    statistics.
    """
    quartiles = ds.group_by(response).agg(
        pl.len().alias("n"),
        pl.col(col_name).min().alias("min"),
        pl.col(col_name).quantile(0.25, interpolation="linear").alias("q1"),
        pl.col(col_name).median().alias("median"),
        pl.col(col_name).quantile(0.75, interpolation="linear").alias("q3"),
        pl.col(col_name).max().alias("max"),
    )

    iqr = pl.col("q3") - pl.col("q1")
    whiskers = (
        ds.join(quartiles, on=response)
        .filter(
            pl.col(col_name).is_between(pl.col("q1") - 1.5 * iqr, pl.col("q3") + 1.5 * iqr)
        )
        .group_by(response)
        .agg(
            pl.col(col_name).min().alias("lower_whisker"),
            pl.col(col_name).max().alias("upper_whisker"),
        )
    )

    return (
        _response_domain(ds, response, response_levels)
        .join(quartiles, on=response, how="left")
        .join(whiskers, on=response, how="left")
        .with_columns(pl.col("n").fill_null(0).cast(pl.Int64))
        .select(
            response,
            "n",
            "min",
            "lower_whisker",
            "q1",
            "median",
            "q3",
            "upper_whisker",
            "max",
        )
        .sort(response)
    )


def stacked_proportions(ds: pl.DataFrame, col_name: str, response: str) -> pl.DataFrame:
    """Share of each predictor category within every observed response level."""
    return (
        ds.group_by([response, col_name])
        .agg(pl.len().alias("count"))
        .with_columns(
            (pl.col("count") / pl.col("count").sum().over(response)).alias("proportion")
        )
        .sort([response, col_name])
    )


def densities_by_group(
    ds: pl.DataFrame, col_name: str, response: str, n_points: int = 512
) -> pl.DataFrame:
    """One density curve of the response per predictor category.

    Categories are coloured in descending frequency order, matching the
    single-variable bar chart of the same column.
    """
    categories = (
        ds.group_by(col_name)
        .len(name="count")
        .sort(["count", col_name], descending=[True, False])[col_name]
        .to_list()
    )

    curves = []
    for i, category in enumerate(categories):
        values = ds.filter(pl.col(col_name) == category)[response].to_numpy()
        curves.append(
            kde_curve(values, n_points=n_points).with_columns(
                pl.lit(category).alias(col_name),
                pl.lit(palette_color(i)).alias("color"),
            )
        )
    return pl.concat(curves, how="vertical_relaxed")


def summarize_pair(
    ds: pl.DataFrame,
    col_name: str,
    variable_type,
    response: str = RESPONSE,
    response_levels=RESPONSE_LEVELS,
    heatmap_color_range=("white", "blue"),
    density_points: int = 512,
) -> Optional[PlotSpec]:
    """Selects the predictor-vs-response plot form by the predictor's variable type.

    Pairing the response with itself yields ``None``.
    """
    variable_type = VariableType.parse(variable_type)
    if col_name == response:
        return None

    domain = {"response_domain": list(response_levels)}

    if variable_type in (VariableType.DISCRETE, VariableType.ORDINAL):
        return PlotSpec(
            kind=PlotKind.HEATMAP,
            column=col_name,
            data=contingency_counts(ds, col_name, response, response_levels),
            options={**domain, "color_range": list(heatmap_color_range)},
        )

    elif variable_type == VariableType.CONTINUOUS:
        return PlotSpec(
            kind=PlotKind.BOXPLOT,
            column=col_name,
            data=grouped_box_stats(ds, col_name, response, response_levels),
            options=domain,
        )

    elif variable_type == VariableType.CATEGORICAL_FEW:
        return PlotSpec(
            kind=PlotKind.STACKED_PROPORTION,
            column=col_name,
            data=stacked_proportions(ds, col_name, response),
            options=domain,
        )

    elif variable_type == VariableType.CATEGORICAL_MANY:
        return PlotSpec(
            kind=PlotKind.DENSITY_BY_GROUP,
            column=col_name,
            data=densities_by_group(ds, col_name, response, density_points),
            options=domain,
        )

    raise UnrecognizedVariableTypeError(variable_type)


def summarize_pairs(
    ds: pl.DataFrame, target_col: str, response_levels, parameters: dict
) -> dict:
    """Runs the two-variable summary for every predictor against the response."""
    plots = {}
    for col_name in ds.columns:
        plot = summarize_pair(
            ds,
            col_name,
            classify(col_name),
            response=target_col,
            response_levels=response_levels,
            heatmap_color_range=parameters["heatmap_color_range"],
            density_points=parameters["density_points"],
        )
        if plot is not None:
            plots[col_name] = plot

    log.info("bivariate_summaries_built", pairs=len(plots), response=target_col)
    return plots

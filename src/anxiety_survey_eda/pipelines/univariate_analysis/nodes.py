import numpy as np
import pandas as pd
import polars as pl
import scipy.stats as stats
import structlog

from anxiety_survey_eda.density import kde_curve
from anxiety_survey_eda.exceptions import UnrecognizedVariableTypeError
from anxiety_survey_eda.schema import VariableType, classify
from anxiety_survey_eda.specs import (
    PlotKind,
    PlotSpec,
    StatKind,
    StatSpec,
    palette_color,
)

log = structlog.get_logger(__name__)


def frequency_table(
    ds: pl.DataFrame, col_name: str, by_frequency: bool = False
) -> pl.DataFrame:
    """
    Counts and proportions per observed category.

    Categories keep their natural (sorted) order unless ``by_frequency`` is
    set, in which case they are sorted by descending count.
    """
    freq_df = (
        ds.group_by(col_name)
        .len(name="count")
        .with_columns((pl.col("count") / pl.sum("count")).alias("proportion"))
    )
    if by_frequency:
        return freq_df.sort(["count", col_name], descending=[True, False])
    return freq_df.sort(col_name)


def numeric_summary(values, decimals: int = 3) -> dict:
    """Mean, median, population standard deviation and Fisher-Pearson skewness."""
    data = np.asarray(values, dtype=float)
    return {
        "mean": round(float(np.mean(data)), decimals),
        "median": round(float(np.median(data)), decimals),
        "std": round(float(np.std(data)), decimals),
        "skewness": round(float(stats.skew(data, bias=True)), decimals),
    }


def histogram(values, n_bins: int = 10) -> pl.DataFrame:
    """Equal-width bins; always exactly ``n_bins`` rows."""
    counts, edges = np.histogram(np.asarray(values, dtype=float), bins=n_bins)
    return pl.DataFrame(
        {"bin_start": edges[:-1], "bin_end": edges[1:], "count": counts.astype(np.int64)}
    )


def summarize(
    ds: pl.DataFrame,
    col_name: str,
    variable_type,
    n_bins: int = 10,
    bandwidth_adjust: float = 1.5,
    density_points: int = 512,
    decimals: int = 3,
) -> tuple[PlotSpec, StatSpec]:
    """Selects the plot form and statistics for one column by its variable type."""
    variable_type = VariableType.parse(variable_type)

    if variable_type in (VariableType.CATEGORICAL_FEW, VariableType.ORDINAL):
        freq_df = frequency_table(ds, col_name)
        plot = PlotSpec(kind=PlotKind.BAR, column=col_name, data=freq_df)
        stat = StatSpec(column=col_name, kind=StatKind.FREQUENCY, table=freq_df)

    elif variable_type == VariableType.CATEGORICAL_MANY:
        freq_df = frequency_table(ds, col_name, by_frequency=True)
        freq_df = freq_df.with_columns(
            pl.Series("color", [palette_color(i) for i in range(freq_df.height)])
        )
        plot = PlotSpec(
            kind=PlotKind.BAR,
            column=col_name,
            data=freq_df,
            options={"sort": "descending", "colored": True},
        )
        stat = StatSpec(
            column=col_name, kind=StatKind.FREQUENCY, table=freq_df.drop("color")
        )

    elif variable_type in (VariableType.DISCRETE, VariableType.CONTINUOUS):
        data = ds[col_name].to_numpy()
        plot = PlotSpec(
            kind=PlotKind.HISTOGRAM,
            column=col_name,
            data=histogram(data, n_bins),
            overlay=kde_curve(data, adjust=bandwidth_adjust, n_points=density_points),
            options={"n_bins": n_bins, "bandwidth_adjust": bandwidth_adjust},
        )
        stat = StatSpec(
            column=col_name,
            kind=StatKind.NUMERIC,
            table=pl.DataFrame([numeric_summary(data, decimals)]),
        )

    else:
        raise UnrecognizedVariableTypeError(variable_type)

    return plot, stat


def summarize_all(ds: pl.DataFrame, parameters: dict) -> tuple:
    """
    Runs the single-variable summary over every classified column.

    Returns:
        tuple: PlotSpecs keyed by column, frequency tables as records keyed by
        column, and one numeric-summary row per numeric column.
    """
    plots = {}
    frequency_tables = {}
    numeric_rows = []

    for col_name in ds.columns:
        plot, stat = summarize(
            ds,
            col_name,
            classify(col_name),
            n_bins=parameters["n_bins"],
            bandwidth_adjust=parameters["bandwidth_adjust"],
            density_points=parameters["density_points"],
            decimals=parameters["decimals"],
        )
        plots[col_name] = plot

        if stat.kind == StatKind.FREQUENCY:
            frequency_tables[col_name] = stat.to_records()
        else:
            numeric_rows.append({"variable": col_name, **stat.to_records()[0]})

    log.info(
        "univariate_summaries_built",
        categorical=len(frequency_tables),
        numeric=len(numeric_rows),
    )
    return plots, frequency_tables, pd.DataFrame(numeric_rows)

import altair as alt
import pandas as pd
import polars as pl
import structlog

from anxiety_survey_eda.schema import RESPONSE, label
from anxiety_survey_eda.specs import PlotKind, PlotSpec

log = structlog.get_logger(__name__)

# density-by-group curves exceed the default 5000-row cap
alt.data_transformers.disable_max_rows()

WIDTH = 400
HEIGHT = 300


def bar_chart(spec: PlotSpec) -> alt.Chart:
    col_name = spec.column
    freq_df = spec.data.to_pandas()
    sort = "-y" if spec.options.get("sort") == "descending" else None

    encoding = {
        "x": alt.X(f"{col_name}:N", sort=sort, title=label(col_name)),
        "y": alt.Y("count:Q", title="Count"),
        "tooltip": [col_name, "count", alt.Tooltip("proportion", format=".1%")],
    }
    if spec.options.get("colored"):
        encoding["color"] = alt.Color("color:N", scale=None, legend=None)

    return (
        alt.Chart(freq_df)
        .mark_bar(color="teal")
        .encode(**encoding)
        .properties(title=f"Distribution: {label(col_name)}", width=WIDTH, height=HEIGHT)
    )


def histogram_chart(spec: PlotSpec) -> alt.LayerChart:
    """Histogram on the density scale with the KDE curve overlaid."""
    col_name = spec.column
    bins = spec.data.with_columns(
        (
            pl.col("count")
            / (pl.col("count").sum() * (pl.col("bin_end") - pl.col("bin_start")))
        ).alias("density")
    ).to_pandas()

    hist = (
        alt.Chart(bins)
        .mark_bar(color="#4c78a8", opacity=0.7)
        .encode(
            x=alt.X("bin_start:Q", title=label(col_name)),
            x2="bin_end:Q",
            y=alt.Y("density:Q", title="Density"),
            tooltip=["bin_start", "bin_end", "count"],
        )
    )
    layers = [hist]

    if spec.overlay is not None and spec.overlay.height:
        layers.append(
            alt.Chart(spec.overlay.to_pandas())
            .mark_line(color="red")
            .encode(x="x:Q", y="density:Q")
        )

    return alt.layer(*layers).properties(
        title=f"Distribution: {label(col_name)}", width=WIDTH, height=HEIGHT
    )


def heatmap_chart(spec: PlotSpec) -> alt.Chart:
    col_name = spec.column
    return (
        alt.Chart(spec.data.to_pandas())
        .mark_rect()
        .encode(
            x=alt.X(
                f"{RESPONSE}:O",
                scale=alt.Scale(domain=spec.options["response_domain"]),
                title=label(RESPONSE),
            ),
            y=alt.Y(f"{col_name}:O", title=label(col_name)),
            color=alt.Color(
                "count:Q", scale=alt.Scale(range=spec.options["color_range"])
            ),
            tooltip=[RESPONSE, col_name, "count"],
        )
        .properties(title="Contingency Heatmap", width=WIDTH, height=HEIGHT)
    )


def boxplot_chart(spec: PlotSpec) -> alt.LayerChart:
    col_name = spec.column
    box_df = spec.data.filter(pl.col("n") > 0).to_pandas()
    x = alt.X(
        f"{RESPONSE}:O",
        scale=alt.Scale(domain=spec.options["response_domain"]),
        title=label(RESPONSE),
    )
    base = alt.Chart(box_df).encode(x=x)

    whiskers = base.mark_rule().encode(
        y=alt.Y("lower_whisker:Q", title=label(col_name)), y2="upper_whisker:Q"
    )
    boxes = base.mark_bar(size=20, color="#4c78a8").encode(
        y="q1:Q", y2="q3:Q", tooltip=[RESPONSE, "n", "q1", "median", "q3"]
    )
    medians = base.mark_tick(color="white", size=20).encode(y="median:Q")

    return alt.layer(whiskers, boxes, medians).properties(
        title="Grouped Boxplot", width=WIDTH, height=HEIGHT
    )


def stacked_proportion_chart(spec: PlotSpec) -> alt.Chart:
    col_name = spec.column
    return (
        alt.Chart(spec.data.to_pandas())
        .mark_bar()
        .encode(
            x=alt.X(
                f"{RESPONSE}:O",
                scale=alt.Scale(domain=spec.options["response_domain"]),
                title=label(RESPONSE),
            ),
            y=alt.Y(
                "proportion:Q",
                stack="normalize",
                title="Proportion",
                axis=alt.Axis(format="%"),
            ),
            color=alt.Color(f"{col_name}:N", title=label(col_name)),
            tooltip=[RESPONSE, col_name, "count", alt.Tooltip("proportion", format=".1%")],
        )
        .properties(title="Proportion by Anxiety Level", width=WIDTH, height=HEIGHT)
    )


def density_by_group_chart(spec: PlotSpec) -> alt.Chart:
    col_name = spec.column
    colors = spec.data.select(col_name, "color").unique(maintain_order=True)

    return (
        alt.Chart(spec.data.to_pandas())
        .mark_line()
        .encode(
            x=alt.X("x:Q", title=label(RESPONSE)),
            y=alt.Y("density:Q", title="Density"),
            color=alt.Color(
                f"{col_name}:N",
                title=label(col_name),
                scale=alt.Scale(
                    domain=colors[col_name].to_list(), range=colors["color"].to_list()
                ),
            ),
        )
        .properties(title="Anxiety Level Density by Group", width=WIDTH, height=HEIGHT)
    )


def plot_chart(spec: PlotSpec):
    """Renders a PlotSpec as an Altair chart."""
    if spec.kind == PlotKind.BAR:
        return bar_chart(spec)
    elif spec.kind == PlotKind.HISTOGRAM:
        return histogram_chart(spec)
    elif spec.kind == PlotKind.HEATMAP:
        return heatmap_chart(spec)
    elif spec.kind == PlotKind.BOXPLOT:
        return boxplot_chart(spec)
    elif spec.kind == PlotKind.STACKED_PROPORTION:
        return stacked_proportion_chart(spec)
    elif spec.kind == PlotKind.DENSITY_BY_GROUP:
        return density_by_group_chart(spec)
    raise ValueError(f"Unsupported plot kind: {spec.kind!r}")


def render_charts(plot_specs: dict) -> dict:
    """Vega-Lite specifications keyed by column."""
    charts = {col_name: plot_chart(spec).to_dict() for col_name, spec in plot_specs.items()}
    log.info("charts_rendered", charts=len(charts))
    return charts


def mutual_information_chart(mi_df: pd.DataFrame) -> alt.Chart:
    plot_df = mi_df.assign(label=mi_df["feature"].map(label))
    return (
        alt.Chart(plot_df)
        .mark_bar(color="teal")
        .encode(
            x=alt.X("mutual_information:Q", title="Mutual Information (nats)"),
            y=alt.Y("label:N", sort="-x", title=None),
            tooltip=[
                "label",
                alt.Tooltip("mutual_information", format=".4f"),
                alt.Tooltip("p_value", format=".3f"),
            ],
        )
        .properties(title="Mutual Information with Anxiety Level (8-10)", width=WIDTH)
    )


def render_mutual_information_chart(mi_df: pd.DataFrame) -> dict:
    return mutual_information_chart(mi_df).to_dict()


def tercile_log_odds_chart(tercile_df: pd.DataFrame, interacting_predictors: list[str]) -> alt.Chart:
    """Mean predicted log-odds, one panel per tercile of the last interacting predictor."""
    x_col, y_col, facet_col = (f"{c}_tercile" for c in interacting_predictors)
    order = ["Low", "Mid", "High"]

    return (
        alt.Chart(tercile_df)
        .mark_rect()
        .encode(
            x=alt.X(f"{x_col}:O", sort=order, title=label(interacting_predictors[0])),
            y=alt.Y(f"{y_col}:O", sort=order, title=label(interacting_predictors[1])),
            color=alt.Color(
                "mean_log_odds:Q", scale=alt.Scale(scheme="blueorange"), title="Log-odds"
            ),
            tooltip=[x_col, y_col, facet_col, "mean_log_odds", "n"],
        )
        .properties(width=180, height=180)
        .facet(
            column=alt.Column(
                f"{facet_col}:O", sort=order, title=label(interacting_predictors[2])
            )
        )
        .properties(title="Predicted Log-odds of High Anxiety by Tercile")
    )


def render_tercile_log_odds_chart(tercile_df: pd.DataFrame, parameters: dict) -> dict:
    return tercile_log_odds_chart(tercile_df, parameters["interacting_predictors"]).to_dict()

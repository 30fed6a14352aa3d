import marimo

__generated_with = "0.20.2"
app = marimo.App(width="full", app_title="Anxiety Survey Report")

with app.setup:
    import marimo as mo

    import polars as pl

    from anxiety_survey_eda.schema import PREDICTORS, RESPONSE, label
    from anxiety_survey_eda.pipelines.data_processing.nodes import (
        encode_features,
        preprocess_labels,
        standardize_columns,
    )
    from anxiety_survey_eda.pipelines.univariate_analysis.nodes import summarize_all
    from anxiety_survey_eda.pipelines.bivariate_analysis.nodes import summarize_pairs
    from anxiety_survey_eda.pipelines.binary_risk_model.nodes import (
        evaluate_logit_model,
        split_data,
        tercile_log_odds,
        train_interaction_model,
        train_logit_model,
    )
    from anxiety_survey_eda.pipelines.moderate_range_model.nodes import (
        evaluate_ols_model,
        filter_moderate_range,
        train_ols_model,
    )
    from anxiety_survey_eda.pipelines.high_anxiety_signal.nodes import (
        discretize_predictors,
        fit_tree_diagnostic,
        mutual_information_permutation_test,
        select_high_anxiety,
    )
    from anxiety_survey_eda.pipelines.reporting.nodes import (
        mutual_information_chart,
        plot_chart,
        tercile_log_odds_chart,
    )


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    # Lifestyle, Physiology and Self-Reported Anxiety

    An exploratory look at a synthetic survey of roughly eleven thousand
    respondents, followed by two small regression models and a check for
    any signal left within the high-anxiety group.
    """)
    return


@app.cell
def _():
    from pathlib import Path

    from kedro.framework.session import KedroSession
    from kedro.framework.startup import bootstrap_project

    CWD = Path.cwd()
    PROJECT_PATH = next(p for p in [CWD, *CWD.parents] if (p / "pyproject.toml").exists())

    bootstrap_project(PROJECT_PATH)

    with KedroSession.create(PROJECT_PATH) as session:
        context = session.load_context()
        catalog = context.catalog
        params = context.params

        ds_raw: pl.DataFrame = catalog.load("raw_ingestion.ds_anxiety")
    return ds_raw, params


@app.cell
def _(ds_raw: pl.DataFrame, params):
    ds = standardize_columns(ds_raw)
    ds_model = encode_features(
        preprocess_labels(ds, params["target_col"], params["high_anxiety_min"]),
        params["data_processing"]["binary_features"],
        params["data_processing"]["binary_mapping"],
    )
    return ds, ds_model


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ## Single-Variable Analysis

    Categorical and ordinal variables are shown as bar charts of counts;
    discrete and continuous variables as a ten-bin histogram with a smoothed
    density curve (bandwidth 1.5x the rule of thumb).
    """)
    return


@app.cell
def _(ds: pl.DataFrame, params):
    univariate_plots, frequency_tables, numeric_summary = summarize_all(
        ds, params["univariate_analysis"]
    )
    return frequency_tables, numeric_summary, univariate_plots


@app.cell
def _(ds: pl.DataFrame):
    univariate_selector = mo.ui.dropdown(
        options={label(c): c for c in ds.columns},
        value=label(RESPONSE),
        label="Variable",
    )
    univariate_selector
    return (univariate_selector,)


@app.cell
def _(frequency_tables, numeric_summary, univariate_plots, univariate_selector):
    _col = univariate_selector.value
    if _col in frequency_tables:
        _stats = mo.ui.table(frequency_tables[_col], selection=None, label="Frequency Table")
    else:
        _stats = mo.ui.table(
            numeric_summary[numeric_summary["variable"] == _col],
            selection=None,
            label="Summary Statistics",
        )

    mo.hstack([mo.ui.altair_chart(plot_chart(univariate_plots[_col])), _stats])
    return


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ## Each Variable Against Anxiety Level

    Ordinal and discrete predictors are cross-tabulated against all ten
    anxiety levels; continuous predictors are summarised as boxplots per
    level; categorical predictors as proportions within each level.
    """)
    return


@app.cell
def _(ds: pl.DataFrame, params):
    bivariate_plots = summarize_pairs(
        ds, params["target_col"], params["response_levels"], params["bivariate_analysis"]
    )
    return (bivariate_plots,)


@app.cell
def _():
    bivariate_selector = mo.ui.dropdown(
        options={label(c): c for c in PREDICTORS},
        value=label("stress_level"),
        label="Predictor",
    )
    bivariate_selector
    return (bivariate_selector,)


@app.cell
def _(bivariate_plots, bivariate_selector):
    mo.ui.altair_chart(plot_chart(bivariate_plots[bivariate_selector.value]))
    return


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ## Who Reports High Anxiety?

    A logistic regression separates high anxiety (levels 8-10) from
    low/moderate anxiety (1-7) using therapy sessions, stress, sleep,
    caffeine and diet quality. The model is fit on the full table; there is
    no hold-out set, so the confusion matrix below is in-sample.
    """)
    return


@app.cell
def _(ds_model, params):
    _train, _eval = split_data(ds_model, params["binary_risk_model"])
    logit_model = train_logit_model(_train, params["binary_risk_model"])
    logit_metrics, logit_coefficients, logit_confusion = evaluate_logit_model(
        logit_model, _eval, params["binary_risk_model"]
    )

    interaction_model = train_interaction_model(_train, params["binary_risk_model"])
    interaction_coefficients, tercile_grid = tercile_log_odds(
        interaction_model, _train, params["binary_risk_model"]
    )
    return (
        interaction_coefficients,
        logit_coefficients,
        logit_confusion,
        logit_metrics,
        tercile_grid,
    )


@app.cell
def _(logit_coefficients, logit_confusion, logit_metrics):
    mo.vstack(
        [
            mo.ui.table(logit_coefficients, selection=None, label="Coefficients"),
            mo.ui.table(logit_confusion, selection=None, label="Confusion Matrix"),
            mo.hstack(
                [
                    mo.stat(label="Accuracy", value=f"{logit_metrics['accuracy']:.3f}"),
                    mo.stat(label="False Negatives", value=str(logit_metrics["false_negatives"])),
                    mo.stat(label="False Positives", value=str(logit_metrics["false_positives"])),
                    mo.stat(label="Pseudo R-squared", value=f"{logit_metrics['pseudo_r_squared']:.3f}"),
                ]
            ),
        ]
    )
    return


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ### Interactions Among Sleep, Therapy and Diet

    Adding every pairwise interaction among sleep hours, therapy sessions
    and diet quality lets the effect of one depend on the others. The grid
    shows mean predicted log-odds across their terciles.
    """)
    return


@app.cell
def _(interaction_coefficients, params, tercile_grid):
    mo.vstack(
        [
            mo.ui.table(interaction_coefficients, selection=None, label="Interaction Model"),
            mo.ui.altair_chart(
                tercile_log_odds_chart(
                    tercile_grid, params["binary_risk_model"]["interacting_predictors"]
                )
            ),
        ]
    )
    return


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ## How Anxious, Below Level 8?

    Within levels 1-7 an ordinary least-squares fit predicts the level from
    stress, sleep, caffeine, therapy sessions and family history. Predictions
    are rounded and clipped into 1-7 before comparing against the true level.
    """)
    return


@app.cell
def _(ds_model, params):
    _moderate = filter_moderate_range(ds_model, params["moderate_range_model"])
    ols_model = train_ols_model(_moderate, params["moderate_range_model"])
    ols_metrics, ols_coefficients, ols_confusion = evaluate_ols_model(
        ols_model, _moderate, params["moderate_range_model"]
    )

    mo.vstack(
        [
            mo.ui.table(ols_coefficients, selection=None, label="Coefficients"),
            mo.ui.table(ols_confusion, selection=None, label="Confusion Matrix"),
            mo.hstack(
                [
                    mo.stat(label="Exact", value=f"{ols_metrics['exact_accuracy']:.1%}"),
                    mo.stat(label="Within One Level", value=f"{ols_metrics['within_one_accuracy']:.1%}"),
                    mo.stat(label="R-squared", value=f"{ols_metrics['r_squared']:.3f}"),
                ]
            ),
        ]
    )
    return


@app.cell(hide_code=True)
def _():
    mo.md(r"""
    ## Is There Anything to Learn Above Level 7?

    Each predictor is binned into ten equal-frequency bins and its mutual
    information with the anxiety level (8, 9 or 10) compared against 1000
    shuffles of the level.
    """)
    return


@app.cell
def _(ds: pl.DataFrame, params):
    _high = select_high_anxiety(ds, params["target_col"], params["high_anxiety_min"])
    mutual_information = mutual_information_permutation_test(
        discretize_predictors(_high, params["target_col"], params["high_anxiety_signal"]["n_bins"]),
        params["target_col"],
        params["high_anxiety_signal"],
    )
    tree_diagnostic = fit_tree_diagnostic(
        _high, params["target_col"], params["high_anxiety_signal"]
    )
    return mutual_information, tree_diagnostic


@app.cell
def _(mutual_information):
    mo.hstack(
        [
            mo.ui.altair_chart(mutual_information_chart(mutual_information)),
            mo.ui.table(mutual_information, selection=None, label="Mutual Information"),
        ]
    )
    return


@app.cell(hide_code=True)
def _(tree_diagnostic):
    mo.md(rf"""
    A conditional inference tree with deliberately loose stopping rules
    (criterion {tree_diagnostic["mincriterion"]}, minimum bucket
    {tree_diagnostic["min_bucket"]}) made **{tree_diagnostic["n_splits"]}**
    splits and predicts level {tree_diagnostic["majority_class"]} for
    {tree_diagnostic["majority_share"]:.0%} of the subgroup.

    ```
    {tree_diagnostic["structure"]}
    ```
    """)
    return


if __name__ == "__main__":
    app.run()

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    render_charts,
    render_mutual_information_chart,
    render_tercile_log_odds_chart,
)


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=render_charts,
                inputs="univariate_analysis.plot_specs",
                outputs="reporting.univariate_charts",
                name="render_univariate_charts_node",
            ),
            node(
                func=render_charts,
                inputs="bivariate_analysis.plot_specs",
                outputs="reporting.bivariate_charts",
                name="render_bivariate_charts_node",
            ),
            node(
                func=render_mutual_information_chart,
                inputs="high_anxiety_signal.mutual_information",
                outputs="reporting.mutual_information_chart",
                name="render_mutual_information_chart_node",
            ),
            node(
                func=render_tercile_log_odds_chart,
                inputs=[
                    "binary_risk_model.tercile_log_odds",
                    "params:binary_risk_model",
                ],
                outputs="reporting.tercile_log_odds_chart",
                name="render_tercile_log_odds_chart_node",
            ),
        ]
    )

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import summarize_all


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=summarize_all,
                inputs=["processed.ds_anxiety", "params:univariate_analysis"],
                outputs=[
                    "univariate_analysis.plot_specs",
                    "univariate_analysis.frequency_tables",
                    "univariate_analysis.numeric_summary",
                ],
                name="summarize_univariate_node",
            ),
        ]
    )

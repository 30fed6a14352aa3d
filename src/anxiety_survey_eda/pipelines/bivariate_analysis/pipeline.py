from kedro.pipeline import Pipeline, node, pipeline

from .nodes import summarize_pairs


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=summarize_pairs,
                inputs=[
                    "processed.ds_anxiety",
                    "params:target_col",
                    "params:response_levels",
                    "params:bivariate_analysis",
                ],
                outputs="bivariate_analysis.plot_specs",
                name="summarize_bivariate_node",
            ),
        ]
    )

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    discretize_predictors,
    fit_tree_diagnostic,
    mutual_information_permutation_test,
    select_high_anxiety,
)


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=select_high_anxiety,
                inputs=[
                    "processed.ds_anxiety",
                    "params:target_col",
                    "params:high_anxiety_min",
                ],
                outputs="high_anxiety_subgroup",
                name="select_high_anxiety_node",
            ),
            node(
                func=discretize_predictors,
                inputs=[
                    "high_anxiety_subgroup",
                    "params:target_col",
                    "params:high_anxiety_signal.n_bins",
                ],
                outputs="high_anxiety_discretized",
                name="discretize_predictors_node",
            ),
            node(
                func=mutual_information_permutation_test,
                inputs=[
                    "high_anxiety_discretized",
                    "params:target_col",
                    "params:high_anxiety_signal",
                ],
                outputs="high_anxiety_signal.mutual_information",
                name="mutual_information_permutation_test_node",
            ),
            node(
                func=fit_tree_diagnostic,
                inputs=[
                    "high_anxiety_subgroup",
                    "params:target_col",
                    "params:high_anxiety_signal",
                ],
                outputs="high_anxiety_signal.tree_diagnostic",
                name="fit_tree_diagnostic_node",
            ),
        ]
    )

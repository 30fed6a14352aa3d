from kedro.pipeline import Pipeline, node, pipeline

from .nodes import evaluate_ols_model, filter_moderate_range, train_ols_model


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=filter_moderate_range,
                inputs=["processed.ds_anxiety_model", "params:moderate_range_model"],
                outputs="moderate_range_data",
                name="filter_moderate_range_node",
            ),
            node(
                func=train_ols_model,
                inputs=["moderate_range_data", "params:moderate_range_model"],
                outputs="moderate_range_model.model",
                name="train_ols_model_node",
            ),
            node(
                func=evaluate_ols_model,
                inputs=[
                    "moderate_range_model.model",
                    "moderate_range_data",
                    "params:moderate_range_model",
                ],
                outputs=[
                    "moderate_range_model.metrics",
                    "moderate_range_model.coefficients",
                    "moderate_range_model.confusion_matrix",
                ],
                name="evaluate_ols_model_node",
            ),
        ]
    )

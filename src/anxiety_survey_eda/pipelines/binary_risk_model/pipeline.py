from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    evaluate_logit_model,
    split_data,
    tercile_log_odds,
    train_interaction_model,
    train_logit_model,
)


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=split_data,
                inputs=["processed.ds_anxiety_model", "params:binary_risk_model"],
                outputs=["binary_risk_train_data", "binary_risk_eval_data"],
                name="split_binary_risk_data_node",
            ),
            node(
                func=train_logit_model,
                inputs=["binary_risk_train_data", "params:binary_risk_model"],
                outputs="binary_risk_model.model",
                name="train_logit_model_node",
            ),
            node(
                func=evaluate_logit_model,
                inputs=[
                    "binary_risk_model.model",
                    "binary_risk_eval_data",
                    "params:binary_risk_model",
                ],
                outputs=[
                    "binary_risk_model.metrics",
                    "binary_risk_model.coefficients",
                    "binary_risk_model.confusion_matrix",
                ],
                name="evaluate_logit_model_node",
            ),
            node(
                func=train_interaction_model,
                inputs=["binary_risk_train_data", "params:binary_risk_model"],
                outputs="binary_risk_model.interaction_model",
                name="train_interaction_model_node",
            ),
            node(
                func=tercile_log_odds,
                inputs=[
                    "binary_risk_model.interaction_model",
                    "binary_risk_train_data",
                    "params:binary_risk_model",
                ],
                outputs=[
                    "binary_risk_model.interaction_coefficients",
                    "binary_risk_model.tercile_log_odds",
                ],
                name="tercile_log_odds_node",
            ),
        ]
    )

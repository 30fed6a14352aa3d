from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    check_data_integrity,
    encode_features,
    preprocess_labels,
    standardize_columns,
)


def create_pipeline(**kwargs) -> Pipeline:
    return pipeline(
        [
            node(
                func=standardize_columns,
                inputs="raw_ingestion.ds_anxiety",
                outputs="processed.ds_anxiety",
                name="standardize_columns_node",
            ),
            node(
                func=check_data_integrity,
                inputs="processed.ds_anxiety",
                outputs="data_processing.integrity_report",
                name="check_data_integrity_node",
            ),
            node(
                func=preprocess_labels,
                inputs=[
                    "processed.ds_anxiety",
                    "params:target_col",
                    "params:high_anxiety_min",
                ],
                outputs="ds_anxiety_labels_processed",
                name="preprocess_labels_node",
            ),
            node(
                func=encode_features,
                inputs=[
                    "ds_anxiety_labels_processed",
                    "params:data_processing.binary_features",
                    "params:data_processing.binary_mapping",
                ],
                outputs="processed.ds_anxiety_model",
                name="encode_features_node",
            ),
        ]
    )

from pathlib import Path

import pytest
from kedro.framework.startup import bootstrap_project
from kedro.io import DataCatalog, MemoryDataset
from kedro.runner import SequentialRunner

from anxiety_survey_eda.pipelines import (
    binary_risk_model,
    bivariate_analysis,
    data_processing,
    high_anxiety_signal,
    moderate_range_model,
    reporting,
    univariate_analysis,
)

PROJECT_PATH = Path(__file__).resolve().parents[2]

PIPELINES = [
    data_processing,
    univariate_analysis,
    bivariate_analysis,
    binary_risk_model,
    moderate_range_model,
    high_anxiety_signal,
    reporting,
]

REPORT_OUTPUTS = {
    "reporting.univariate_charts",
    "reporting.bivariate_charts",
    "reporting.mutual_information_chart",
    "reporting.tercile_log_odds_chart",
}


@pytest.fixture(scope="module")
def default_pipeline():
    return sum(module.create_pipeline() for module in PIPELINES)


def _resolve(parameters, dataset):
    value = parameters
    for key in dataset.removeprefix("params:").split("."):
        value = value[key]
    return value


def test_project_metadata_matches_installed_kedro():
    metadata = bootstrap_project(PROJECT_PATH)

    assert metadata.package_name == "anxiety_survey_eda"


def test_only_raw_survey_and_parameters_are_free_inputs(default_pipeline):
    free_inputs = default_pipeline.inputs()

    assert "raw_ingestion.ds_anxiety" in free_inputs
    assert {i for i in free_inputs if not i.startswith("params:")} == {"raw_ingestion.ds_anxiety"}


def test_node_names_are_unique(default_pipeline):
    names = [n.name for n in default_pipeline.nodes]
    assert len(names) == len(set(names))
    assert "fit_tree_diagnostic_node" in names


def test_catalog_entries_are_pipeline_datasets(default_pipeline, config_loader):
    catalog = config_loader["catalog"]
    datasets = default_pipeline.datasets()

    assert set(catalog) <= datasets
    assert default_pipeline.all_outputs() >= REPORT_OUTPUTS | {
        "binary_risk_model.confusion_matrix",
        "moderate_range_model.confusion_matrix",
        "high_anxiety_signal.mutual_information",
        "high_anxiety_signal.tree_diagnostic",
    }


def test_parameters_cover_every_params_input(default_pipeline, parameters):
    for dataset in default_pipeline.inputs():
        if not dataset.startswith("params:"):
            continue
        value = parameters
        for key in dataset.removeprefix("params:").split("."):
            assert key in value, dataset
            value = value[key]


def test_binary_mapping_keeps_string_keys(parameters):
    mapping = parameters["data_processing"]["binary_mapping"]
    assert dict(mapping) == {"No": 0, "Yes": 1}


def test_default_pipeline_runs_end_to_end(default_pipeline, parameters, raw_survey):
    params = {
        **parameters,
        "high_anxiety_signal": {**parameters["high_anxiety_signal"], "n_permutations": 50},
    }
    datasets = {
        dataset: MemoryDataset(_resolve(params, dataset))
        for dataset in default_pipeline.inputs()
        if dataset.startswith("params:")
    }
    datasets["raw_ingestion.ds_anxiety"] = MemoryDataset(raw_survey)

    outputs = SequentialRunner().run(default_pipeline, DataCatalog(datasets=datasets))

    assert REPORT_OUTPUTS <= set(outputs)
    assert "occupation" in outputs["reporting.bivariate_charts"]

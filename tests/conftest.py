from pathlib import Path

import numpy as np
import polars as pl
import pytest
from kedro.config import OmegaConfigLoader

from anxiety_survey_eda.pipelines.data_processing.nodes import (
    encode_features,
    preprocess_labels,
)
from anxiety_survey_eda.schema import COLUMN_LABELS

OCCUPATIONS = [
    "Artist",
    "Athlete",
    "Chef",
    "Doctor",
    "Engineer",
    "Freelancer",
    "Lawyer",
    "Musician",
    "Nurse",
    "Other",
    "Scientist",
    "Student",
    "Teacher",
    "Unemployed",
]

CONF_SOURCE = Path(__file__).resolve().parents[1] / "conf"

BINARY_FEATURES = ["smoking", "family_history", "dizziness", "medication", "recent_life_event"]


def _yes_no(rng, n, p_yes=0.4):
    return np.where(rng.random(n) < p_yes, "Yes", "No")


@pytest.fixture(scope="session")
def config_loader():
    return OmegaConfigLoader(
        conf_source=str(CONF_SOURCE), base_env="base", default_run_env="local"
    )


@pytest.fixture(scope="session")
def parameters(config_loader) -> dict:
    """Project parameters as configured in conf/base."""
    return config_loader["parameters"]


@pytest.fixture(scope="session")
def survey() -> pl.DataFrame:
    """Synthetic survey keyed by column keys; anxiety tracks stress and sleep."""
    rng = np.random.default_rng(7)
    n = 600

    stress = rng.integers(1, 11, n)
    sleep = np.round(rng.normal(6.5, 1.2, n), 1)
    anxiety = np.clip(
        np.round(0.8 * stress - 0.5 * (sleep - 6.5) + rng.normal(0, 1.3, n)), 1, 10
    ).astype(np.int64)

    return pl.DataFrame(
        {
            "age": rng.integers(18, 65, n),
            "gender": rng.choice(["Male", "Female", "Other"], n),
            "occupation": rng.permutation(np.resize(OCCUPATIONS, n)),
            "sleep_hours": sleep,
            "physical_activity": np.round(rng.uniform(0, 10, n), 1),
            "caffeine_intake": rng.integers(0, 600, n),
            "alcohol_consumption": rng.integers(0, 20, n),
            "smoking": _yes_no(rng, n),
            "family_history": _yes_no(rng, n),
            "stress_level": stress,
            "heart_rate": rng.integers(60, 120, n),
            "breathing_rate": rng.integers(12, 30, n),
            "sweating_level": rng.integers(1, 6, n),
            "dizziness": _yes_no(rng, n),
            "medication": _yes_no(rng, n),
            "therapy_sessions": rng.integers(0, 10, n),
            "recent_life_event": _yes_no(rng, n),
            "diet_quality": rng.integers(1, 11, n),
            "anxiety_level": anxiety,
        }
    )


@pytest.fixture(scope="session")
def raw_survey(survey) -> pl.DataFrame:
    """The synthetic survey with CSV display headers."""
    return survey.rename(COLUMN_LABELS)


@pytest.fixture(scope="session")
def survey_model(survey):
    return encode_features(
        preprocess_labels(survey, "anxiety_level", 8),
        BINARY_FEATURES,
        {"No": 0, "Yes": 1},
    )

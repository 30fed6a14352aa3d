import category_encoders as ce
import pandas as pd
import polars as pl
import structlog

from anxiety_survey_eda.exceptions import MissingColumnsError
from anxiety_survey_eda.schema import COLUMNS, classify, key_for_label

log = structlog.get_logger(__name__)


def standardize_columns(ds_raw: pl.DataFrame) -> pl.DataFrame:
    """Renames CSV headers to internal keys and classifies every column.

    Raises ``UnrecognizedVariableTypeError`` for a header outside the schema
    and ``MissingColumnsError`` when a schema column is absent.
    """
    renamed = ds_raw.rename({c: key_for_label(c) for c in ds_raw.columns})

    missing = [c for c in COLUMNS if c not in renamed.columns]
    if missing:
        raise MissingColumnsError(missing)

    for column in renamed.columns:
        classify(column)

    log.info("survey_loaded", rows=renamed.height, columns=renamed.width)
    return renamed.select(COLUMNS)


def check_data_integrity(ds: pl.DataFrame) -> dict:
    """Missing values, duplicated rows and per-type column counts."""
    null_counts = ds.null_count().row(0, named=True)
    n_duplicated = int(ds.is_duplicated().sum())

    types = {}
    for column in ds.columns:
        types.setdefault(classify(column).value, []).append(column)

    report = {
        "rows": ds.height,
        "columns": ds.width,
        "missing": {k: int(v) for k, v in null_counts.items() if v},
        "total_missing": int(sum(null_counts.values())),
        "duplicated_rows": n_duplicated,
        "variable_types": types,
    }
    log.info(
        "data_integrity_checked",
        rows=report["rows"],
        total_missing=report["total_missing"],
        duplicated_rows=n_duplicated,
    )
    return report


def preprocess_labels(
    ds: pl.DataFrame, target_col: str, high_anxiety_min: int
) -> pl.DataFrame:
    """Adds the binary ``high_anxiety`` label (1 when the level is at least ``high_anxiety_min``)."""
    return ds.with_columns(
        (pl.col(target_col) >= high_anxiety_min).cast(pl.Int8).alias("high_anxiety")
    )


def encode_features(
    ds: pl.DataFrame, binary_features: list[str], binary_mapping: dict
) -> pd.DataFrame:
    """
    Binary-codes the Yes/No features for modeling.

    Args:
        ds: Survey table with the ``high_anxiety`` label.
        binary_features: Categorical (Few) columns holding Yes/No answers.
        binary_mapping: Answer to code mapping, e.g. ``{"No": 0, "Yes": 1}``.

    Returns:
        pd.DataFrame: Modeling table; all other columns pass through.
    """
    ds_pandas = ds.to_pandas()

    encoder = ce.OrdinalEncoder(
        cols=binary_features,
        mapping=[{"col": c, "mapping": dict(binary_mapping)} for c in binary_features],
    )
    ds_encoded = encoder.fit_transform(ds_pandas)

    log.info("binary_features_encoded", features=binary_features)
    return ds_encoded

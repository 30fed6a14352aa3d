"""Hand-authored variable typing for the anxiety survey.

Every column is addressed internally by a stable snake_case key. The CSV
header (with its parenthetical units) is kept only as a display label and is
used at the loading and rendering boundaries.
"""

from enum import Enum

from anxiety_survey_eda.exceptions import UnrecognizedVariableTypeError

RESPONSE = "anxiety_level"
RESPONSE_LEVELS = list(range(1, 11))


class VariableType(str, Enum):
    CATEGORICAL_FEW = "Categorical (Few)"
    CATEGORICAL_MANY = "Categorical (Many)"
    ORDINAL = "Ordinal"
    DISCRETE = "Discrete"
    CONTINUOUS = "Continuous"

    @classmethod
    def parse(cls, value) -> "VariableType":
        """Coerce a type string (or member) into a ``VariableType``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedVariableTypeError(value) from None

    @property
    def is_categorical(self) -> bool:
        return self in CATEGORICAL_TYPES

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_TYPES


CATEGORICAL_TYPES = frozenset(
    {VariableType.CATEGORICAL_FEW, VariableType.CATEGORICAL_MANY, VariableType.ORDINAL}
)
NUMERIC_TYPES = frozenset({VariableType.DISCRETE, VariableType.CONTINUOUS})


COLUMN_LABELS = {
    "age": "Age",
    "gender": "Gender",
    "occupation": "Occupation",
    "sleep_hours": "Sleep Hours",
    "physical_activity": "Physical Activity (hrs/week)",
    "caffeine_intake": "Caffeine Intake (mg/day)",
    "alcohol_consumption": "Alcohol Consumption (drinks/week)",
    "smoking": "Smoking",
    "family_history": "Family History of Anxiety",
    "stress_level": "Stress Level (1-10)",
    "heart_rate": "Heart Rate (bpm)",
    "breathing_rate": "Breathing Rate (breaths/min)",
    "sweating_level": "Sweating Level (1-5)",
    "dizziness": "Dizziness",
    "medication": "Medication",
    "therapy_sessions": "Therapy Sessions (per month)",
    "recent_life_event": "Recent Major Life Event",
    "diet_quality": "Diet Quality (1-10)",
    "anxiety_level": "Anxiety Level (1-10)",
}

VARIABLE_TYPES = {
    "age": VariableType.CONTINUOUS,
    "gender": VariableType.CATEGORICAL_FEW,
    "occupation": VariableType.CATEGORICAL_MANY,
    "sleep_hours": VariableType.CONTINUOUS,
    "physical_activity": VariableType.CONTINUOUS,
    "caffeine_intake": VariableType.CONTINUOUS,
    "alcohol_consumption": VariableType.DISCRETE,
    "smoking": VariableType.CATEGORICAL_FEW,
    "family_history": VariableType.CATEGORICAL_FEW,
    "stress_level": VariableType.ORDINAL,
    "heart_rate": VariableType.CONTINUOUS,
    "breathing_rate": VariableType.DISCRETE,
    "sweating_level": VariableType.ORDINAL,
    "dizziness": VariableType.CATEGORICAL_FEW,
    "medication": VariableType.CATEGORICAL_FEW,
    "therapy_sessions": VariableType.DISCRETE,
    "recent_life_event": VariableType.CATEGORICAL_FEW,
    "diet_quality": VariableType.ORDINAL,
    "anxiety_level": VariableType.ORDINAL,
}

COLUMNS = list(COLUMN_LABELS)
PREDICTORS = [c for c in COLUMNS if c != RESPONSE]

_KEYS_BY_LABEL = {label: key for key, label in COLUMN_LABELS.items()}


def classify(column: str) -> VariableType:
    """Return the variable type of a column key.

    Raises:
        UnrecognizedVariableTypeError: if the column is not part of the
            hand-authored typing.
    """
    try:
        return VARIABLE_TYPES[column]
    except KeyError:
        raise UnrecognizedVariableTypeError(column) from None


def columns_of_type(variable_type) -> list[str]:
    variable_type = VariableType.parse(variable_type)
    return [c for c, t in VARIABLE_TYPES.items() if t is variable_type]


def label(column: str) -> str:
    """Display label for a column key; unknown keys are returned unchanged."""
    return COLUMN_LABELS.get(column, column)


def key_for_label(column_label: str) -> str:
    """Map a CSV header to its internal key.

    Raises:
        UnrecognizedVariableTypeError: if the header is not part of the schema.
    """
    if column_label in _KEYS_BY_LABEL:
        return _KEYS_BY_LABEL[column_label]
    if column_label in COLUMN_LABELS:
        return column_label
    raise UnrecognizedVariableTypeError(column_label)

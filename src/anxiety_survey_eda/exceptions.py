class AnxietySurveyError(Exception):
    """Base class for errors raised by this project."""


class UnrecognizedVariableTypeError(AnxietySurveyError, ValueError):
    """A column or type string falls outside the hand-authored variable typing."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unrecognized variable type: {value!r}")


class MissingColumnsError(AnxietySurveyError, KeyError):
    """The loaded table lacks columns of the fixed survey schema."""

    def __init__(self, columns):
        self.columns = list(columns)
        super().__init__(f"Missing survey columns: {', '.join(self.columns)}")

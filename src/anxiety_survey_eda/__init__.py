"""anxiety_survey_eda
"""

__version__ = "0.1.0"

"""
Errors Module
-------------
Exceptions raised by the survey preprocessing components.
All of them derive from SurveyPreprocessingError so callers can catch the family at once.
"""
from typing import Dict, Iterable, List, Any


class SurveyPreprocessingError(Exception):
    """Base class for every error reported by the toolbox."""


class UnknownFieldError(SurveyPreprocessingError, KeyError):
    """A requested field (column) does not exist in the table."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Unknown field(s): {self.fields}")

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return self.args[0]


class DuplicateFieldNameError(SurveyPreprocessingError, ValueError):
    """Renaming or aggregation would produce two fields with the same name."""

    def __init__(self, duplicates: Iterable[str]):
        self.duplicates = sorted(set(duplicates))
        super().__init__(f"Duplicate field name(s) after transformation: {self.duplicates}")


class MissingValueInAggregateError(SurveyPreprocessingError, ValueError):
    """
    One or more subscale sums hit a missing or unparseable item value.

    Attributes:
        incomplete (Dict[str, List[Any]]): group name -> participant ids whose score is missing.
    """

    def __init__(self, incomplete: Dict[str, List[Any]]):
        self.incomplete = dict(incomplete)
        summary = ", ".join(f"{name}: {ids}" for name, ids in self.incomplete.items())
        super().__init__(f"Missing values in aggregated scores ({summary})")

from .errors import (
    SurveyPreprocessingError,
    UnknownFieldError,
    DuplicateFieldNameError,
    MissingValueInAggregateError,
)
from .config import DEFAULT_CONFIG, load_config
from .preprocessors.questionnaire_preprocessor import (
    QuestionnairePreprocessor,
    normalize_field_name,
    make_rename_rule,
)
from .processors.questionnaire_scale_processor import (
    GroupSpec,
    QuestionnaireScaleProcessor,
    reverse_score,
)
from .readers.csv_reader import CSVReader
from .reporters.csv_reporter import CSVReporter
from .services.questionnaire_service import QuestionnaireService
from .utils.logging_utils import setup_logging, log_progress_bar

__all__ = [
    "SurveyPreprocessingError",
    "UnknownFieldError",
    "DuplicateFieldNameError",
    "MissingValueInAggregateError",
    "DEFAULT_CONFIG",
    "load_config",
    "QuestionnairePreprocessor",
    "normalize_field_name",
    "make_rename_rule",
    "GroupSpec",
    "QuestionnaireScaleProcessor",
    "reverse_score",
    "CSVReader",
    "CSVReporter",
    "QuestionnaireService",
    "setup_logging",
    "log_progress_bar",
]

"""FormInput package."""

from forminput.exceptions import (
    FieldBindingError,
    FrozenFormError,
    InvalidStepError,
    PackageError,
    SanitizeError,
    SchemaError,
    SettingsError,
    UnknownFieldError,
)
from forminput.fields import BoundField
from forminput.form import Form
from forminput.logging import configure_logging, get_logger
from forminput.request import QueryRequest, build_query
from forminput.schema import Schema
from forminput.settings import Settings, get_settings
from forminput.steps import CURRENT_STEP, StepForm
from forminput.typing import ErrorCategory, ErrorKind, FieldError, FieldKind, FieldSpec, FieldType

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("forminput")

__all__ = [
    "CURRENT_STEP",
    "BoundField",
    "ErrorCategory",
    "ErrorKind",
    "FieldBindingError",
    "FieldError",
    "FieldKind",
    "FieldSpec",
    "FieldType",
    "Form",
    "FrozenFormError",
    "InvalidStepError",
    "PackageError",
    "QueryRequest",
    "SanitizeError",
    "Schema",
    "SchemaError",
    "Settings",
    "SettingsError",
    "StepForm",
    "UnknownFieldError",
    "__version__",
    "build_query",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]

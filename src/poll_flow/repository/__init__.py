"""Repository layer for data access."""

from .base import SurveyRemote, SurveySink, SurveySource
from .composite import CompositeSurveyRemote, CompositeSurveySource
from .factory import Backends, create_backends

__all__ = [
    "SurveySource",
    "SurveySink",
    "SurveyRemote",
    "CompositeSurveySource",
    "CompositeSurveyRemote",
    "Backends",
    "create_backends",
]

"""
Shared Domain Module
====================

Evaluation model, VESS scoring and the config service.
"""

from vess.shared.domain.models import (
    DEFAULT_LANGUAGE,
    Config,
    EvaluationSession,
    LayerEvaluation,
    Sample,
    Screen,
    default_session_description,
    resize_layers,
)
from vess.shared.domain.scoring import (
    ManagementDecision,
    ScoreSummary,
    format_score,
    management_decision,
    sample_score,
    session_score,
    summarize,
)
from vess.shared.domain.config_service import ConfigService

__all__ = [
    # Models
    "DEFAULT_LANGUAGE",
    "Config",
    "EvaluationSession",
    "LayerEvaluation",
    "Sample",
    "Screen",
    "default_session_description",
    "resize_layers",
    # Scoring
    "ManagementDecision",
    "ScoreSummary",
    "format_score",
    "management_decision",
    "sample_score",
    "session_score",
    "summarize",
    # Services
    "ConfigService",
]

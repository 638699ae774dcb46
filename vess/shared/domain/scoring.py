"""VESS score aggregation and management-decision banding.

Scores are averaged per layer: a session score is the total of every layer
score across all samples divided by the total layer count, not a mean of
per-sample means. Banding is the same for sample and session scores.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from vess.shared.domain.models import EvaluationSession, LayerEvaluation, Sample

NOT_AVAILABLE = "N/A"


class ManagementDecision(str, Enum):
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"
    INVALID = "INVALID"

    @property
    def message(self) -> str:
        return DECISION_MESSAGES[self]


DECISION_MESSAGES = {
    ManagementDecision.GOOD: "Good structure: no changes to management are needed.",
    ManagementDecision.MODERATE: "Moderate structure: long-term improvements to management are recommended.",
    ManagementDecision.SEVERE: "Poor structure: short-term changes to management are required.",
    ManagementDecision.INVALID: "Invalid score: review the layer scores.",
}

# Inclusive (low, high) bounds per decision
DECISION_BANDS = (
    (1.0, 2.9, ManagementDecision.GOOD),
    (3.0, 3.9, ManagementDecision.MODERATE),
    (4.0, 5.0, ManagementDecision.SEVERE),
)


@dataclass(frozen=True)
class ScoreSummary:
    """Score plus everything a result screen shows for it."""
    score: Optional[float]
    decision: ManagementDecision
    message: str
    display: str


def layers_score(layers: Iterable[LayerEvaluation]) -> Optional[float]:
    values = [layer.score_value for layer in layers]
    if not values:
        return None
    return sum(values) / len(values)


def sample_score(sample: Sample) -> Optional[float]:
    """Mean layer score of a sample, or None when it has no layers."""
    return layers_score(sample.layers)


def session_score(session: EvaluationSession) -> Optional[float]:
    """Mean over all layers of all samples, or None when there are none."""
    return layers_score(layer for sample in session.samples for layer in sample.layers)


def management_decision(score: Optional[float]) -> ManagementDecision:
    if score is None or math.isnan(score):
        return ManagementDecision.INVALID
    for low, high, decision in DECISION_BANDS:
        if low <= score <= high:
            return decision
    return ManagementDecision.INVALID


def format_score(score: Optional[float]) -> str:
    if score is None or math.isnan(score):
        return NOT_AVAILABLE
    return f"{score:.1f}"


def summarize(score: Optional[float]) -> ScoreSummary:
    decision = management_decision(score)
    return ScoreSummary(
        score=score,
        decision=decision,
        message=decision.message,
        display=format_score(score),
    )

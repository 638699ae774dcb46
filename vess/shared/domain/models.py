"""Domain model for VESS field evaluations.

Value types only: every model is frozen and changed by building a new copy.

Lifecycle:
    1. The evaluator profile (Config) is read from the ConfigStore
    2. An EvaluationSession is started with a description
    3. Samples, each with one LayerEvaluation per soil layer, are appended
    4. The session is completed (end_time set once) and moved to history
"""

from __future__ import annotations

import math
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from vess.shared.core.errors import InvalidInputError

DEFAULT_LANGUAGE = "Português (Brasil)"


def now_millis() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex


class Screen(str, Enum):
    """Screens the UI can show; exactly one is current."""
    MENU = "MENU"
    CONFIGURATIONS = "CONFIGURATIONS"
    NEW_EVALUATION_DESCRIPTION = "NEW_EVALUATION_DESCRIPTION"
    EVALUATION_SAMPLE = "EVALUATION_SAMPLE"
    EVALUATION_RESULT = "EVALUATION_RESULT"
    FINAL_SUMMARY = "FINAL_SUMMARY"
    HISTORY = "HISTORY"


class Config(BaseModel):
    """Evaluator profile persisted by the ConfigStore.

    Serialized with camelCase aliases (``cityState``) so the stored record
    keeps the layout ``{name, email, country, address, cityState, language}``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore', strict=True)

    name: str = ""
    email: str = ""
    country: str = ""
    address: str = ""
    city_state: str = Field(default="", alias="cityState")
    language: str = DEFAULT_LANGUAGE

    def to_record(self) -> Dict[str, str]:
        """Plain mapping in the persisted layout."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: Any) -> "Config":
        """Build from a persisted mapping; absent fields fall back to defaults."""
        return cls.model_validate(record)


class LayerEvaluation(BaseModel):
    """One soil layer of a sample, as typed by the evaluator."""
    model_config = ConfigDict(frozen=True)

    length: str = ""
    score: str = ""

    @property
    def score_value(self) -> float:
        """Numeric score; unparsable or non-finite text counts as 0.0."""
        return parse_number(self.score)


def parse_number(text: str) -> float:
    """Parse numeric text, accepting a decimal comma ("3,5")."""
    try:
        value = float(text.strip().replace(",", "."))
    except (AttributeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def resize_layers(layers: Sequence[Any], count: int) -> Tuple[Any, ...]:
    """Grow with empty layers or truncate from the end.

    Entries that survive the resize are returned untouched.
    """
    layers = tuple(layers)
    if count <= len(layers):
        return layers[:max(count, 0)]
    return layers + tuple(LayerEvaluation() for _ in range(count - len(layers)))


_LAYER_COUNT = TypeAdapter(int)


class Sample(BaseModel):
    """One physical soil extraction, evaluated layer by layer."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str = ""
    num_layers: int = Field(default=1, ge=1)
    location: str = ""
    evaluator: str = ""
    layers: Tuple[LayerEvaluation, ...] = ()
    other_info: str = ""
    timestamp: int = Field(default_factory=now_millis)

    @model_validator(mode="before")
    @classmethod
    def _track_layer_count(cls, data: Any) -> Any:
        # layers always has exactly num_layers entries
        if isinstance(data, dict):
            layers = data.get("layers") or ()
            raw_count = data.get("num_layers")
            if raw_count is None:
                count = len(layers) or 1
            else:
                # Same lax coercion the field applies ("3", 3.0)
                try:
                    count = _LAYER_COUNT.validate_python(raw_count)
                except ValidationError:
                    return data
            if count >= 1:
                data = {**data, "num_layers": count, "layers": resize_layers(layers, count)}
        return data

    def with_layer_count(self, num_layers: int) -> "Sample":
        """Copy with ``num_layers`` layers, keeping existing layer data."""
        if num_layers < 1:
            raise InvalidInputError(f"A sample needs at least one layer, got {num_layers}")
        return self.model_copy(update={
            "num_layers": num_layers,
            "layers": resize_layers(self.layers, num_layers),
        })

    def with_layer(self, index: int, length: Optional[str] = None, score: Optional[str] = None) -> "Sample":
        """Copy with the layer at ``index`` replaced."""
        if not 0 <= index < len(self.layers):
            raise InvalidInputError(f"Layer index {index} out of range for {len(self.layers)} layer(s)")
        current = self.layers[index]
        replacement = LayerEvaluation(
            length=current.length if length is None else length,
            score=current.score if score is None else score,
        )
        layers = self.layers[:index] + (replacement,) + self.layers[index + 1:]
        return self.model_copy(update={"layers": layers})


class EvaluationSession(BaseModel):
    """A field visit: an ordered, append-only list of samples."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    description: str
    samples: Tuple[Sample, ...] = ()
    start_time: int = Field(default_factory=now_millis)
    end_time: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def total_layers(self) -> int:
        return sum(len(sample.layers) for sample in self.samples)

    def with_sample(self, sample: Sample) -> "EvaluationSession":
        if not self.is_active:
            raise InvalidInputError(f"Session {self.id} is completed; samples cannot be added")
        return self.model_copy(update={"samples": self.samples + (sample,)})

    def completed(self, end_time: int) -> "EvaluationSession":
        """Completed copy; ``end_time`` is clamped to at least one millisecond after start."""
        if not self.is_active:
            raise InvalidInputError(f"Session {self.id} was already completed")
        return self.model_copy(update={"end_time": max(end_time, self.start_time + 1)})


def default_session_description(moment: Optional[datetime] = None) -> str:
    """Description the new-evaluation form pre-fills, e.g. "Evaluation 01/01/2025 - 19h00"."""
    moment = moment or datetime.now()
    return f"Evaluation {moment:%d/%m/%Y} - {moment:%H}h{moment:%M}"

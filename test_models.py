"""Tests for the evaluation domain model."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from vess.shared.core.errors import InvalidInputError
from vess.shared.domain.models import (
    Config,
    EvaluationSession,
    LayerEvaluation,
    Sample,
    default_session_description,
    parse_number,
    resize_layers,
)


def test_sample_layers_track_layer_count():
    assert len(Sample(num_layers=3).layers) == 3
    assert Sample(num_layers=3).layers[2] == LayerEvaluation()


def test_sample_layer_count_inferred_from_layers():
    sample = Sample(layers=[LayerEvaluation(score="2"), LayerEvaluation(score="3")])
    assert sample.num_layers == 2


@pytest.mark.parametrize("count", ["3", 3.0])
def test_sample_layers_follow_coerced_layer_count(count):
    sample = Sample(num_layers=count, layers=[LayerEvaluation(score="2")])

    assert sample.num_layers == 3
    assert sample.layers == (LayerEvaluation(score="2"), LayerEvaluation(), LayerEvaluation())


def test_sample_rejects_zero_layers():
    with pytest.raises(ValidationError):
        Sample(num_layers=0)
    with pytest.raises(ValidationError):
        Sample(num_layers="three")


def test_shrinking_keeps_first_layers_data():
    sample = Sample(layers=[
        LayerEvaluation(length="12", score="2"),
        LayerEvaluation(length="8", score="4"),
        LayerEvaluation(length="5", score="5"),
    ])

    shrunk = sample.with_layer_count(1)

    assert shrunk.num_layers == 1
    assert shrunk.layers == (LayerEvaluation(length="12", score="2"),)


def test_growing_appends_empty_layers():
    sample = Sample(layers=[LayerEvaluation(length="12", score="2")])

    grown = sample.with_layer_count(3)

    assert grown.layers[0] == LayerEvaluation(length="12", score="2")
    assert grown.layers[1:] == (LayerEvaluation(), LayerEvaluation())
    assert grown.id == sample.id


def test_with_layer_count_rejects_zero():
    with pytest.raises(InvalidInputError):
        Sample().with_layer_count(0)


def test_with_layer_replaces_one_field():
    sample = Sample(num_layers=2).with_layer(1, score="3")
    sample = sample.with_layer(1, length="15")

    assert sample.layers[0] == LayerEvaluation()
    assert sample.layers[1] == LayerEvaluation(length="15", score="3")

    with pytest.raises(InvalidInputError):
        sample.with_layer(2, score="1")


def test_samples_are_immutable():
    sample = Sample(name="S1")
    with pytest.raises(ValidationError):
        sample.name = "changed"


def test_resize_layers_truncates_from_the_end():
    layers = (LayerEvaluation(score="1"), LayerEvaluation(score="2"))
    assert resize_layers(layers, 1) == (LayerEvaluation(score="1"),)
    assert resize_layers(layers, 2) == layers


@pytest.mark.parametrize("text, expected", [
    ("3", 3.0),
    (" 2.5 ", 2.5),
    ("3,5", 3.5),
    ("", 0.0),
    ("abc", 0.0),
    ("inf", 0.0),
])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


def test_session_completion_is_once_only():
    session = EvaluationSession(description="Visit", start_time=1_000)
    done = session.completed(2_000)

    assert session.is_active
    assert not done.is_active
    assert done.end_time == 2_000

    with pytest.raises(InvalidInputError):
        done.completed(3_000)
    with pytest.raises(InvalidInputError):
        done.with_sample(Sample())


def test_session_end_time_always_after_start():
    session = EvaluationSession(description="Visit", start_time=5_000)

    assert session.completed(4_000).end_time == 5_001
    assert session.completed(5_000).end_time == 5_001
    assert session.completed(9_000).end_time == 9_000


def test_with_sample_appends_in_order():
    first, second = Sample(name="A"), Sample(name="B")
    session = EvaluationSession(description="Visit").with_sample(first).with_sample(second)

    assert [s.name for s in session.samples] == ["A", "B"]
    assert session.total_layers == 2


def test_config_accepts_field_name_and_alias():
    assert Config(city_state="Lages - SC") == Config.from_record({"cityState": "Lages - SC"})
    assert Config(city_state="X").to_record()["cityState"] == "X"


def test_config_rejects_non_string_fields():
    with pytest.raises(ValidationError):
        Config.from_record({"name": 42})


def test_default_session_description():
    moment = datetime(2025, 1, 1, 19, 5)
    assert default_session_description(moment) == "Evaluation 01/01/2025 - 19h05"

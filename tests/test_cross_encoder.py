"""Tests for the cross-encoder scorer."""

from unittest.mock import patch

import pytest

from src.core.protocols.scorer import ScorerProtocol
from src.infrastructure.rerankers.cross_encoder import CrossEncoderScorer


@pytest.fixture
def model():
    with patch("src.infrastructure.rerankers.cross_encoder.CrossEncoder") as cls:
        yield cls.return_value


def test_scores_batch_in_one_predict_call(model, make_candidate):
    model.predict.return_value = [0.2, 0.7]
    scorer = CrossEncoderScorer("test-model", scope_bonus=1.0)
    batch = [
        make_candidate(cid="a#000", doc_id="project-a", title="Pilot", text="simulator"),
        make_candidate(cid="b#000", doc_id="b", title="", text="robotics"),
    ]

    scores = scorer.score_many("simulator", batch, scope="project-a")

    assert isinstance(scorer, ScorerProtocol)
    assert scores == pytest.approx([1.2, 0.7])
    model.predict.assert_called_once_with([["simulator", "Pilot\nsimulator"], ["simulator", "robotics"]])


def test_empty_batch_skips_model(model):
    assert CrossEncoderScorer("test-model").score_many("anything", []) == []
    model.predict.assert_not_called()


def test_single_score_uses_batch(model, make_candidate):
    model.predict.return_value = [0.5]
    scorer = CrossEncoderScorer("test-model")

    assert scorer.score("q", make_candidate()) == pytest.approx(0.5)

"""Tests for candidate scoring and query expansion."""

import math

import pytest

from src.core.protocols.scorer import ScorerProtocol
from src.core.strategies import HeuristicScorer, QueryExpansionStrategy, query_terms


def test_query_terms_strip_edge_punctuation():
    assert query_terms("What's your  leadership style?") == ["what's", "your", "leadership", "style"]


class TestHeuristicScorer:
    @pytest.fixture
    def scorer(self):
        return HeuristicScorer()

    def test_satisfies_protocol(self, scorer):
        assert isinstance(scorer, ScorerProtocol)

    def test_title_match_outranks_body_match(self, scorer, make_candidate):
        titled = make_candidate(cid="a#000", doc_id="a", title="Leadership Style", text="I lead with empowerment")
        body = make_candidate(
            cid="b#000", doc_id="b", title="Metrics", text="leadership is a style of achieving outcomes"
        )

        titled_score = scorer.score("leadership style", titled)
        body_score = scorer.score("leadership style", body)

        assert titled_score > body_score
        assert titled_score == pytest.approx(4 / math.log(len("I lead with empowerment") + 1))

    def test_more_matching_terms_never_score_lower(self, scorer, make_candidate):
        fewer = make_candidate(text="alpha xxxx yyyy", title="")
        more = make_candidate(text="alpha beta yyyy", title="")
        assert len(fewer.text) == len(more.text)

        assert scorer.score("alpha beta", more) >= scorer.score("alpha beta", fewer)

    def test_scope_exact_beats_prefix(self, scorer, make_candidate):
        exact = make_candidate(doc_id="project-cns", text="platform")
        prefix = make_candidate(doc_id="project-cns-2", text="platform")

        assert scorer.score("platform", exact, scope="project-cns") > scorer.score(
            "platform", prefix, scope="project-cns"
        )
        assert scorer.score("platform", prefix, scope="project-cns") > scorer.score("platform", prefix)

    def test_empty_text_does_not_divide_by_zero(self, scorer, make_candidate):
        candidate = make_candidate(text="", title="Robotics")
        assert scorer.score("robotics", candidate) == 2.0

    def test_score_many_matches_single_scores(self, scorer, make_candidate):
        batch = [
            make_candidate(cid="a#000", doc_id="project-a", text="platform for pilots"),
            make_candidate(cid="b#000", doc_id="b", text="nothing here"),
        ]

        scores = scorer.score_many("platform", batch, scope="project-a")

        assert scores == [scorer.score("platform", c, scope="project-a") for c in batch]
        assert scorer.score_many("platform", []) == []


class TestQueryExpansion:
    def test_acronym_expanded(self):
        expanded = QueryExpansionStrategy().apply("What is CNS?")
        assert expanded.startswith("What is CNS?")
        assert "Central Nervous System" in expanded

    def test_unmatched_query_unchanged(self):
        assert QueryExpansionStrategy().apply("teaching robotics") == "teaching robotics"

    def test_word_boundaries(self):
        # "ras" inside another word does not trigger
        assert QueryExpansionStrategy().apply("erase it") == "erase it"

    def test_custom_rules(self):
        strategy = QueryExpansionStrategy([(r"\bml\b", ["machine learning"])])
        assert strategy.apply("ML work") == "ML work machine learning"

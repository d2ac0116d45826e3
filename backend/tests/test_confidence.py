"""Tests for confidence scoring."""

import pytest
from pydantic import ValidationError

from txnflow.parsers import ConfidenceScorer, ConfidenceWeights
from txnflow.schemas import Direction


class TestConfidenceScorer:
    """Test the weighted confidence function."""

    def test_minimal_result(self):
        """Institution and amount on top of the base score."""
        assert ConfidenceScorer().score(institution=True, amount=True) == 0.9

    def test_optional_fields_add_weight(self):
        scorer = ConfidenceScorer()
        assert scorer.score(institution=False, amount=True, reference=True) == 0.8
        assert scorer.score(institution=False, amount=True, reason=True) == 0.75

    def test_clamped_to_one(self):
        score = ConfidenceScorer().score(
            institution=True, amount=True, balance=True,
            reference=True, merchant=True, reason=True,
        )
        assert score == 1.0

    def test_transfer_penalty(self):
        score = ConfidenceScorer().score(
            institution=True, amount=True, direction=Direction.transfer,
        )
        assert score == 0.85

    def test_alternate_script_penalty(self):
        score = ConfidenceScorer().score(institution=True, amount=True, alternate_script=True)
        assert score == 0.8

    def test_clamped_to_zero(self):
        """Heavy penalties never push the score below zero."""
        weights = ConfidenceWeights(base=0.0, fallback_penalty=0.9)
        assert ConfidenceScorer(weights).score(institution=False, amount=False, fallback=True) == 0.0

    def test_injected_weights(self):
        weights = ConfidenceWeights(alternate_script_penalty=0.25)
        score = ConfidenceScorer(weights).score(institution=True, amount=True, alternate_script=True)
        assert score == 0.65

    def test_deterministic(self):
        scorer = ConfidenceScorer()
        kwargs = dict(institution=True, amount=True, merchant=True, direction=Direction.transfer)
        assert scorer.score(**kwargs) == scorer.score(**kwargs)


class TestConfidenceWeights:
    """Test the weights model."""

    def test_frozen(self):
        weights = ConfidenceWeights()
        with pytest.raises(ValidationError):
            weights.base = 0.9

    def test_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            ConfidenceWeights(fallback_penalty="heavy")

    def test_from_settings(self):
        class Settings:
            alternate_script_penalty = 0.2
            fallback_penalty = 0.4

        weights = ConfidenceWeights.from_settings(Settings())

        assert weights.alternate_script_penalty == 0.2
        assert weights.fallback_penalty == 0.4
        assert weights.base == 0.5

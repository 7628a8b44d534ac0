"""
Tests for name normalization and the two similarity scorers.

Run with: pytest scrapvoice/voice_match/tests/test_similarity.py -v
"""

import pytest

from scrapvoice.voice_match.similarity import (
    normalize_name,
    is_substring_match,
    specificity,
    vocabulary_similarity,
    best_vocabulary_match,
    catalog_similarity,
    pick_best_candidate,
)


class TestNormalizeName:

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_name("  Copper   Wire ") == "copper wire"

    def test_drops_punctuation(self):
        assert normalize_name("Plastic-Bottles!!") == "plasticbottles"
        assert normalize_name("T.V.") == "tv"

    def test_keeps_arabic(self):
        assert normalize_name("زجاجات  بلاستيك") == "زجاجات بلاستيك"

    def test_empty(self):
        assert normalize_name("") == ""
        assert normalize_name(None) == ""


class TestHelpers:

    def test_substring_either_direction(self):
        assert is_substring_match("chair", "Office Chair")
        assert is_substring_match("Office Chair", "chair")
        assert not is_substring_match("steal", "steel")
        assert not is_substring_match("", "steel")

    def test_specificity_orders_by_words_then_length(self):
        assert specificity("Plastic Bottles") > specificity("Plastics")
        assert specificity("Cardboard") > specificity("Paper")


class TestVocabularySimilarity:

    def test_exact(self):
        assert vocabulary_similarity("Chair", "chair") == 100.0

    def test_close_substring(self):
        assert vocabulary_similarity("plastic", "plastics") == 90.0

    def test_generic_substring_floors_at_70(self):
        # "glass" is 5/13 of "glass bottles"
        assert vocabulary_similarity("glass", "glass bottles") == 70.0

    def test_no_containment_scores_zero(self):
        assert vocabulary_similarity("iron", "copper") == 0.0
        assert vocabulary_similarity("irn", "iron") == 0.0

    def test_blank(self):
        assert vocabulary_similarity("", "chair") == 0.0


class TestBestVocabularyMatch:

    CANDIDATES = ["plastics", "بلاستيك", "plastic bottles", "زجاجات بلاستيك", "chair", "كرسي"]

    def test_exact_wins_immediately(self):
        assert best_vocabulary_match("chair", self.CANDIDATES) == ("chair", 100.0)

    def test_substring_match(self):
        assert best_vocabulary_match("plastic", self.CANDIDATES) == ("plastics", 90.0)
        assert best_vocabulary_match("plastic bottle", self.CANDIDATES) == ("plastic bottles", 90.0)

    def test_below_threshold(self):
        assert best_vocabulary_match("unicorn", self.CANDIDATES) is None
        # A generic 70-point containment is not enough
        assert best_vocabulary_match("glass", ["glass bottles"]) is None

    def test_tie_prefers_longer_candidate(self):
        best = best_vocabulary_match("mobile phon", ["mobile phone", "mobile phones"])
        assert best == ("mobile phones", 90.0)

    def test_custom_threshold(self):
        assert best_vocabulary_match("glass", ["glass bottles"], threshold=70) == ("glass bottles", 70.0)


class TestCatalogSimilarity:

    def test_exact_after_normalization(self):
        assert catalog_similarity("Plastics", " plastics ") == 100.0

    def test_containment_near_equal_length(self):
        # 6/7 length ratio -> 60 + 35 * 0.857 = 90, above the 88 floor
        assert catalog_similarity("bottle", "bottles") == 90.0

    def test_containment_mid_ratio(self):
        # 7/15 ratio -> 60 + 35 * 0.467 = 76.33
        assert catalog_similarity("plastic", "plastic bottles") == pytest.approx(76.33)

    def test_containment_floor(self):
        # 2/22 ratio -> 63.18 raised to the 65 floor
        assert catalog_similarity("tv", "tv stand with speakers") == 65.0

    def test_containment_never_reaches_exact(self):
        assert catalog_similarity("chairs", "chair") <= 95.0

    def test_misspelling_falls_below_threshold(self):
        # no shared word, "i" and "r" agree by position: 0.3 * 50
        assert catalog_similarity("irn", "iron") == 15.0

    def test_reordered_words(self):
        assert catalog_similarity("chair office", "office chair") == pytest.approx(66.67)

    def test_symmetric_for_containment(self):
        assert catalog_similarity("copper", "copper wire") == catalog_similarity("copper wire", "copper")

    def test_blank(self):
        assert catalog_similarity("", "chair") == 0.0
        assert catalog_similarity("!!", "chair") == 0.0


class TestPickBestCandidate:
    """Test the close-race tie-break."""

    def test_empty(self):
        assert pick_best_candidate([], "chair") is None

    def test_single(self):
        candidate = (70.0, "Chair", "i3")
        assert pick_best_candidate([candidate], "chair") == candidate

    def test_clear_leader_wins(self):
        top = (90.0, "Chair", "i3")
        runner = (70.0, "Office Chair", "i4")
        assert pick_best_candidate([runner, top], "chair") == top

    def test_more_specific_runner_up_wins_close_race(self):
        top = (74.58, "Chair", "i3")
        runner = (66.67, "Office Chair", "i4")
        assert pick_best_candidate([top, runner], "chair office") == runner

    def test_less_specific_runner_up_never_wins(self):
        top = (80.0, "Office Chair", "i4")
        runner = (78.0, "Chair", "i3")
        assert pick_best_candidate([top, runner], "chair") == top

    def test_non_substring_leader_keeps_clear_lead(self):
        top = (80.0, "Steel", "s1")
        runner = (76.0, "Steel Pipe", "s2")
        assert pick_best_candidate([top, runner], "steal") == top

    def test_non_substring_leader_loses_narrow_lead(self):
        top = (80.0, "Steel", "s1")
        runner = (78.0, "Steel Pipe", "s2")
        assert pick_best_candidate([top, runner], "steal") == runner

    def test_custom_window(self):
        top = (74.58, "Chair", "i3")
        runner = (66.67, "Office Chair", "i4")
        assert pick_best_candidate([top, runner], "chair office", window=5) == top

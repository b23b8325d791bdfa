"""Tests for search query parsing and ranking."""

from poprev.services.search_service import parse_query, rank, score_fields, tokenize


class TestParseQuery:
    """Query syntax."""

    def test_terms_are_lowercased_and_deduplicated(self):
        query = parse_query("Trinity trinity Paradise")
        assert query.terms == ["trinity", "paradise"]
        assert query.phrases == []
        assert query.excluded == []

    def test_phrases_and_exclusions(self):
        query = parse_query('"Eternal  Son" spirit -jesus')
        assert query.phrases == ["eternal son"]
        assert query.terms == ["spirit"]
        assert query.excluded == ["jesus"]

    def test_stop_words_dropped(self):
        query = parse_query("what is the trinity")
        assert query.terms == ["trinity"]

    def test_blank_query_is_empty(self):
        assert parse_query("   ").is_empty
        assert parse_query("-god").is_empty

    def test_needles_use_first_word_of_phrases(self):
        query = parse_query('"mansion worlds" morontia')
        assert query.needles == ["morontia", "mansion"]


class TestScoring:
    """Relevance scoring."""

    def test_html_is_ignored(self):
        assert tokenize("<p>The <strong>Son</strong></p>") == ["the", "son"]

    def test_no_match_scores_zero(self):
        assert score_fields(["Mansion worlds"], parse_query("trinity")) == 0.0

    def test_more_distinct_terms_score_higher(self):
        query = parse_query("mansion worlds")
        one = score_fields(["the mansion"], query)
        both = score_fields(["the mansion worlds"], query)
        assert both > one > 0

    def test_dense_field_beats_sparse_field(self):
        query = parse_query("trinity")
        short = score_fields(["Trinity"], query)
        long = score_fields(["a long text that mentions the trinity once"], query)
        assert short > long

    def test_missing_phrase_disqualifies(self):
        query = parse_query('"eternal son" spirit')
        assert score_fields(["the infinite spirit"], query) == 0.0
        assert score_fields(["the eternal son and infinite spirit"], query) > 0

    def test_rank_is_stable_and_limited(self):
        docs = ["trinity one", "trinity two", "nothing", "trinity three"]
        ranked = rank(docs, parse_query("trinity"), lambda d: (d,), limit=2)
        assert ranked == ["trinity one", "trinity two"]

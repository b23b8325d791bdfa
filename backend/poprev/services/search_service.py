"""Full-text search over responses.

Query syntax follows the usual document-database text search:

* bare words are alternative terms; a document needs at least one of them
* ``"quoted phrases"`` must all appear in the document
* ``-word`` excludes documents containing the word

Matching is case-insensitive over title, question and answer (HTML tags
stripped). Both stores use ``rank`` so results order the same way.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence, TypeVar

T = TypeVar("T")

_TAG_RE = re.compile(r"<[^>]+>")
_TOKEN_RE = re.compile(r"[\w']+", re.UNICODE)
_PHRASE_RE = re.compile(r'"([^"]*)"')

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
    "is", "it", "of", "on", "or", "that", "the", "to", "was", "what",
    "with",
})


@dataclass
class SearchQuery:
    terms: List[str] = field(default_factory=list)
    phrases: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.terms and not self.phrases

    @property
    def needles(self) -> List[str]:
        """
        Substrings a candidate must contain at least one of.

        Phrases contribute only their first word: markup and punctuation
        between words defeat a raw substring match, so ``score_fields``
        checks the full phrase on tokenized text.
        """
        needles = list(self.terms)
        for phrase in self.phrases:
            first = phrase.split()[0]
            if first not in needles:
                needles.append(first)
        return needles


def strip_html(text: str) -> str:
    return _TAG_RE.sub(" ", text or "")


def tokenize(text: str) -> List[str]:
    return [t.lower() for t in _TOKEN_RE.findall(strip_html(text))]


def parse_query(raw: str) -> SearchQuery:
    """Split a raw query string into terms, phrases and exclusions."""
    query = SearchQuery()
    raw = raw or ""

    for phrase in _PHRASE_RE.findall(raw):
        phrase = " ".join(tokenize(phrase))
        if phrase and phrase not in query.phrases:
            query.phrases.append(phrase)
    remainder = _PHRASE_RE.sub(" ", raw)

    for word in remainder.split():
        negated = word.startswith("-")
        for token in tokenize(word.lstrip("-")):
            if negated:
                if token not in query.excluded:
                    query.excluded.append(token)
            elif token not in STOP_WORDS and token not in query.terms:
                query.terms.append(token)

    return query


def score_fields(fields: Sequence[str], query: SearchQuery) -> float:
    """
    Relevance of one document, 0.0 when it does not match.

    Each field contributes, per matched term, 0.5 plus the term's share of the
    field's tokens, so documents matching more distinct terms rank first and
    dense matches in short fields beat sparse ones in long fields. Phrases
    count as one extra point per field they occur in.
    """
    token_lists = [tokenize(f) for f in fields]
    joined = [" ".join(tokens) for tokens in token_lists]

    all_tokens = set()
    for tokens in token_lists:
        all_tokens.update(tokens)
    if any(word in all_tokens for word in query.excluded):
        return 0.0
    for phrase in query.phrases:
        if not any(phrase in text for text in joined):
            return 0.0

    score = 0.0
    for tokens, text in zip(token_lists, joined):
        if not tokens:
            continue
        for term in query.terms:
            hits = tokens.count(term)
            if hits:
                score += 0.5 + hits / len(tokens)
        for phrase in query.phrases:
            if phrase in text:
                score += 1.0

    return score


def rank(
    documents: Iterable[T],
    query: SearchQuery,
    fields: Callable[[T], Sequence[str]],
    limit: int,
) -> List[T]:
    """Return matching documents by descending score, stable on ties."""
    scored = []
    for doc in documents:
        score = score_fields(fields(doc), query)
        if score > 0:
            scored.append((score, doc))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [doc for _, doc in scored[:limit]]

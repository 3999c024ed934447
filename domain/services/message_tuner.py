"""Post-processing that makes generated outreach read like a person wrote it.

Every step is a pure string transform; running ``tune`` on its own
output returns the same text.
"""

from __future__ import annotations

import re

from domain.models import TunedMessage

_CONTRACTIONS: dict[str, str] = {
    "I am": "I'm", "I have": "I've", "I will": "I'll", "I would": "I'd",
    "you are": "you're", "you have": "you've", "you will": "you'll", "you would": "you'd",
    "we are": "we're", "we have": "we've", "we will": "we'll", "we would": "we'd",
    "they are": "they're", "they have": "they've", "they will": "they'll",
    "they would": "they'd",
    "he is": "he's", "he will": "he'll", "he would": "he'd",
    "she is": "she's", "she will": "she'll", "she would": "she'd",
    "it is": "it's", "it will": "it'll",
    "that is": "that's", "that will": "that'll",
    "there is": "there's",
    "what is": "what's", "who is": "who's", "how is": "how's",
    "do not": "don't", "does not": "doesn't", "did not": "didn't",
    "is not": "isn't", "are not": "aren't", "was not": "wasn't", "were not": "weren't",
    "has not": "hasn't", "have not": "haven't", "had not": "hadn't",
    "will not": "won't", "would not": "wouldn't", "could not": "couldn't",
    "should not": "shouldn't", "can not": "can't", "cannot": "can't",
    "let us": "let's",
}

_CONTRACTION_PATTERNS = [
    (re.compile(rf"\b{re.escape(full)}\b", re.IGNORECASE), short)
    for full, short in _CONTRACTIONS.items()
]

# (pattern, replacement, marker that shows the paraphrase is already applied)
_PARAPHRASES = [
    (re.compile(r"\bI think\b"), "I actually think", "I actually think"),
    (re.compile(r"\bIt seems\b"), "It really seems", "It really seems"),
]

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")

MAX_BODY_WORDS = 150
MAX_SUBJECT_CHARS = 60


def apply_contractions(text: str) -> str:
    result = text
    for pattern, short in _CONTRACTION_PATTERNS:
        result = pattern.sub(lambda m, s=short: _match_case(m.group(0), s), result)
    return result


def remove_dashes(text: str) -> str:
    result = re.sub(r"\s*—\s*", ". ", text)
    result = re.sub(r"\s*–\s*", " - ", result)
    return re.sub(r"\.\.\s", ". ", result)


def add_paraphrase(text: str) -> str:
    """Insert at most one light paraphrase, and none if one is already there."""
    if any(marker in text for _, _, marker in _PARAPHRASES):
        return text
    for pattern, replacement, _ in _PARAPHRASES:
        if pattern.search(text):
            return pattern.sub(replacement, text, count=1)
    return text


def cap_length(text: str, max_words: int = MAX_BODY_WORDS) -> str:
    if len(text.split()) <= max_words:
        return text
    kept: list[str] = []
    word_count = 0
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence_words = len(sentence.split())
        if word_count + sentence_words > max_words and word_count > 0:
            break
        kept.append(sentence)
        word_count += sentence_words
    return " ".join(kept)


def collapse_whitespace(text: str) -> str:
    result = re.sub(r"[ \t]{2,}", " ", text)
    result = re.sub(r"\n{3,}", "\n\n", result)
    return result.strip()


def tune_subject(subject: str) -> str:
    result = re.sub(r"^(?:(?:Re|Fwd):\s*)+", "", subject.strip(), flags=re.IGNORECASE)
    result = apply_contractions(result)
    if len(result) > MAX_SUBJECT_CHARS:
        result = result[: MAX_SUBJECT_CHARS - 3] + "..."
    return result


class MessageTuner:
    """Pure text transform applied to every generated message."""

    def __init__(self, *, max_words: int = MAX_BODY_WORDS) -> None:
        self._max_words = max_words

    def tune(self, body: str, subject: str | None = None) -> TunedMessage:
        tuned = remove_dashes(body)
        tuned = apply_contractions(tuned)
        tuned = add_paraphrase(tuned)
        tuned = cap_length(tuned, self._max_words)
        tuned = collapse_whitespace(tuned)
        return TunedMessage(
            body=tuned,
            subject=tune_subject(subject) if subject else None,
        )


def _match_case(original: str, replacement: str) -> str:
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement

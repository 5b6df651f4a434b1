"""Split long text into budget-sized pieces on paragraph and sentence boundaries."""

import re

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
# Western punctuation is followed by whitespace; CJK full stops usually are not.
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+|(?<=[。！？])")


def split_sentences(paragraph: str) -> list[str]:
    return [s for s in _SENTENCE_BREAK.split(paragraph) if s]


def hard_split(text: str, max_len: int) -> list[str]:
    return [text[i:i + max_len] for i in range(0, len(text), max_len)]


def chunk_text(text: str, max_len: int) -> list[str]:
    """
    Split ``text`` into ordered chunks of at most ``max_len`` characters.

    Paragraphs (blank-line separated) are packed greedily. A paragraph that is
    too long on its own is split into sentences, and a sentence that is still
    too long is cut at the character budget. Joining the chunks with the
    paragraph/sentence separators reproduces the text up to the whitespace at
    the split points.
    """
    if max_len < 1:
        raise ValueError(f"max_len must be positive, got {max_len}")

    if len(text) <= max_len:
        return [text]

    chunks: list[str] = []
    current = ""

    def flush():
        nonlocal current
        if current:
            chunks.append(current)
            current = ""

    for paragraph in _PARAGRAPH_BREAK.split(text):
        if not paragraph.strip():
            continue

        if current and len(current) + len(PARAGRAPH_SEPARATOR) + len(paragraph) <= max_len:
            current += PARAGRAPH_SEPARATOR + paragraph
            continue
        if not current and len(paragraph) <= max_len:
            current = paragraph
            continue

        flush()
        if len(paragraph) <= max_len:
            current = paragraph
            continue

        for sentence in split_sentences(paragraph):
            if current and len(current) + len(SENTENCE_SEPARATOR) + len(sentence) <= max_len:
                current += SENTENCE_SEPARATOR + sentence
            elif not current and len(sentence) <= max_len:
                current = sentence
            else:
                flush()
                if len(sentence) <= max_len:
                    current = sentence
                else:
                    # no boundary left to respect
                    chunks.extend(hard_split(sentence, max_len))

    flush()
    return chunks

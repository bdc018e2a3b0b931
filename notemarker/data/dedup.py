"""
Duplicate removal for parsed comments.

Review exports often list the same comment twice, sometimes under two
spellings of the author ("Baron" in one block, "Baron Ryan" in another).
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from notemarker.core.models import CommentRecord
from notemarker.utils.constants import MAX_AUTHOR_WORD_DIFFERENCE
from notemarker.utils.logger import get_logger

if TYPE_CHECKING:
    from notemarker.data.diagnostics import DiagnosticReport

logger = get_logger(__name__)

NON_LETTERS = re.compile(r"[^a-z]")


def normalize_author(author: str | None) -> str:
    """
    Reduce an author name to its first word, lowercase letters only.

    Examples:
        "Baron Ryan" -> "baron"
        "J.D. Smith" -> "jd"
        "" -> "unknown"
    """
    if not author or not isinstance(author, str) or not author.strip():
        return "unknown"

    first_word = author.strip().casefold().split()[0]
    return NON_LETTERS.sub("", first_word)


def normalize_text(text: str) -> str:
    return text.strip().casefold()


def is_author_variation(first: str | None, second: str | None) -> bool:
    """
    Check whether two author names are spellings of the same person.

    True when the shorter name's words are a word-for-word prefix of the
    longer name's and the word counts differ by at most 2.

    Examples:
        ("Baron", "Baron Ryan") -> True
        ("Mike Chen", "Mike") -> True
        ("Mike Chen", "Mike Jones") -> False
    """
    if not first or not second:
        return False

    words1 = first.strip().casefold().split()
    words2 = second.strip().casefold().split()

    if words1 == words2:
        return True

    shorter = min(len(words1), len(words2))
    longer = max(len(words1), len(words2))
    if longer - shorter > MAX_AUTHOR_WORD_DIFFERENCE:
        return False

    return words1[:shorter] == words2[:shorter]


def duplicate_key(comment: CommentRecord) -> tuple[str, str, str]:
    """Composite key (timecode, normalized text, normalized author)."""
    return (str(comment.timecode), normalize_text(comment.text), normalize_author(comment.author))


def remove_duplicate_comments(
    comments: list[CommentRecord],
    report: DiagnosticReport | None = None,
) -> list[CommentRecord]:
    """
    Drop duplicate comments, keeping the first occurrence and input order.

    Args:
        comments: Parsed comments
        report: Optional diagnostic report that receives one entry per
                removed duplicate

    Returns:
        Deduplicated list
    """
    if not comments:
        return []

    seen: dict[tuple[str, str, str], int] = {}
    kept: list[CommentRecord] = []
    exact_duplicates = 0
    author_variations = 0

    for index, comment in enumerate(comments):
        key = duplicate_key(comment)

        if key in seen:
            exact_duplicates += 1
            original_index = seen[key]
            logger.debug(
                f"Exact duplicate at {comment.timecode}: '{comment.text[:50]}' by {comment.author}"
            )
            if report is not None:
                report.record_duplicate(
                    "exact_duplicate", comment, comments[original_index], index, original_index
                )
            continue

        original_index = None
        for (timecode, text, _), seen_index in seen.items():
            if timecode != key[0] or text != key[1]:
                continue
            if is_author_variation(comment.author, comments[seen_index].author):
                original_index = seen_index
                break

        if original_index is not None:
            author_variations += 1
            logger.debug(
                f"Author variation duplicate: '{comment.author}' vs "
                f"'{comments[original_index].author}' at {comment.timecode}"
            )
            if report is not None:
                report.record_duplicate(
                    "author_variation_duplicate", comment, comments[original_index], index, original_index
                )
            continue

        seen[key] = index
        kept.append(comment)

    removed = len(comments) - len(kept)
    if removed:
        logger.info(
            f"Removed {removed} duplicate comment(s) from {len(comments)} "
            f"({exact_duplicates} exact, {author_variations} author variations)"
        )
    else:
        logger.debug(f"No duplicates found in {len(comments)} comments")

    return kept

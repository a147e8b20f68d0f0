"""Helpers shared by the evaluation stages for building prompts and
reading model output."""

import json
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from inforanker.models.article import Article
from inforanker.services.scoring.models import AXES, AXIS_MAX, QualityAxis, clamp

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Split a sequence into lists of at most size items."""
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def truncate(text: str | None, limit: int) -> str:
    """Truncate text to limit characters, marking the cut."""
    if not text:
        return ""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def keywords_label(search_terms: Sequence[str]) -> str:
    """Join search terms for display in a prompt."""
    return ", ".join(search_terms)


def source_name_of(article: Article) -> str:
    return article.source.name if article.source is not None else "Unknown"


def articles_json(
    articles: Sequence[Article],
    summary_chars: int,
    content_chars: int = 0,
    include_native_score: bool = False,
) -> str:
    """Serialize a batch for a prompt. Ids are 1-based positions."""
    payload: list[dict[str, Any]] = []
    for i, article in enumerate(articles, start=1):
        item: dict[str, Any] = {
            "id": i,
            "title": article.title,
            "summary": truncate(article.summary, summary_chars),
            "source": source_name_of(article),
        }
        if content_chars and article.content:
            item["content"] = truncate(article.content, content_chars)
        if include_native_score and article.native_score is not None:
            item["native_score"] = article.native_score
        payload.append(item)
    return json.dumps(payload, ensure_ascii=False)


def evaluations_by_position(data: dict[str, Any], batch_size: int) -> dict[int, dict[str, Any]]:
    """Index a batch response's evaluations by 0-based position.

    Entries with an invalid or out-of-range id are dropped; the first entry
    wins when an id repeats.
    """
    entries = data.get("evaluations")
    if not isinstance(entries, list):
        return {}

    indexed: dict[int, dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            position = int(entry.get("id", 0)) - 1
        except (TypeError, ValueError):
            continue
        if 0 <= position < batch_size and position not in indexed:
            indexed[position] = entry
    return indexed


def parse_number(value: Any) -> float | None:
    """Read a numeric field, or None when it is missing or not a number."""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_axis_scores(entry: dict[str, Any]) -> dict[QualityAxis, float] | None:
    """Read the five axis scores, clamped to 0-20.

    Returns:
        Axis scores, or None when any axis is missing or not a number
    """
    scores: dict[QualityAxis, float] = {}
    for axis in AXES:
        value = parse_number(entry.get(axis.value))
        if value is None:
            return None
        scores[axis] = clamp(value, 0, AXIS_MAX)
    return scores


def parse_axis_reasons(entry: dict[str, Any]) -> dict[QualityAxis, str]:
    return {axis: str(entry.get(f"{axis.value}_reason") or "") for axis in AXES}

"""Audio transcripts: fetching, word indexing and playback synchronisation."""

from __future__ import annotations

import time
from typing import Any, Sequence

import requests
from flask import current_app


class TranscriptFetchError(RuntimeError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


def fetch_transcript(url: str | None) -> list[dict]:
    """Download the transcript JSON, returning ``[]`` when it is unavailable.

    Server and network errors are retried with a linearly growing delay;
    4xx responses are not retried.
    """

    if not url:
        return []
    config = current_app.config
    retries = int(config.get("TRANSCRIPT_FETCH_RETRIES", 2))
    delay = float(config.get("TRANSCRIPT_RETRY_DELAY", 1.0))
    timeout = float(config.get("TRANSCRIPT_FETCH_TIMEOUT", 10))

    last_error: Exception | None = None
    for attempt in range(retries + 1):
        try:
            return _download(url, timeout)
        except TranscriptFetchError as exc:
            last_error = exc
            if exc.status is not None and 400 <= exc.status < 500:
                break
        except (requests.RequestException, ValueError) as exc:
            last_error = exc
        if attempt < retries and delay:
            time.sleep(delay * (attempt + 1))

    current_app.logger.warning("Failed to fetch transcript %s: %s", url, last_error)
    return []


def _download(url: str, timeout: float) -> list[dict]:
    response = requests.get(url, timeout=timeout)
    if not response.ok:
        raise TranscriptFetchError(f"HTTP {response.status_code}", status=response.status_code)
    data = response.json()
    if not isinstance(data, list):
        raise ValueError("Transcript payload must be a list")
    items = clean_items(data)
    if len(items) != len(data):
        current_app.logger.warning("Dropped %d malformed transcript items from %s", len(data) - len(items), url)
    return items


def _timed_word(word: Any) -> dict | None:
    if not isinstance(word, dict):
        return None
    try:
        start, end = float(word["start"]), float(word["end"])
    except (KeyError, TypeError, ValueError):
        return None
    return {**word, "text": str(word.get("text") or ""), "start": start, "end": end}


def clean_items(data: Sequence[Any]) -> list[dict]:
    """Keep well-formed header and sentence items; drop words without numeric timings."""

    items: list[dict] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if item.get("type") != "sentence":
            items.append(item)
            continue
        raw_words = item.get("words")
        words = [w for w in map(_timed_word, raw_words if isinstance(raw_words, list) else []) if w]
        items.append({**item, "words": words})
    return items


def build_word_index(items: Sequence[dict]) -> list[dict]:
    """Flatten sentence items into one list of timed words.

    Header items are skipped and do not advance ``sentence_index``.
    """

    words: list[dict] = []
    sentence_index = 0
    for item in clean_items(items):
        if item.get("type") != "sentence":
            continue
        for position, word in enumerate(item["words"]):
            words.append(
                {
                    "text": word["text"],
                    "start": word["start"],
                    "end": word["end"],
                    "global_index": len(words),
                    "sentence_index": sentence_index,
                    "word_index_in_sentence": position,
                }
            )
        sentence_index += 1
    return words


def find_word_at_time(words: Sequence[dict], current_time: float) -> int | None:
    """Binary-search for the word playing at ``current_time``.

    During a silence between two words the earlier word stays active. Before the
    first word or after the last one nothing is active.
    """

    if not words:
        return None
    if current_time < words[0]["start"] or current_time > words[-1]["end"]:
        return None

    left, right = 0, len(words) - 1
    while left <= right:
        mid = (left + right) // 2
        word = words[mid]
        if word["start"] <= current_time <= word["end"]:
            return mid
        if current_time < word["start"]:
            right = mid - 1
        else:
            left = mid + 1

    if 0 < left < len(words):
        previous, following = words[left - 1], words[left]
        if previous["end"] < current_time < following["start"]:
            return left - 1
    return None


def locate(words: Sequence[dict], current_time: float) -> dict[str, Any]:
    index = find_word_at_time(words, current_time)
    if index is None:
        return {
            "active_word_index": None,
            "active_sentence_index": None,
            "active_word_index_in_sentence": None,
        }
    word = words[index]
    return {
        "active_word_index": index,
        "active_sentence_index": word["sentence_index"],
        "active_word_index_in_sentence": word["word_index_in_sentence"],
    }


def clamp_seek(position: float, duration: float) -> float:
    return max(0.0, min(float(position), float(duration)))

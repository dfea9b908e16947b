"""
Aether Intel - Text Normalizer

Reduces raw HTML (or already-plain text) to a single bounded line of visible
text. Shared by every source fetcher; pure and side-effect free.
"""

import re

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(raw_markup: str, max_length: int) -> str:
    """Strip markup from *raw_markup* and truncate to *max_length* characters.

    <script> and <style> blocks are removed with their contents before any
    other tag is replaced by a space; whitespace runs collapse to one space.
    """
    if not raw_markup or max_length <= 0:
        return ""

    text = _SCRIPT_RE.sub("", raw_markup)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:max_length]

"""
Aether Intel - Analysis Adapter

Turns scraped documents into insight drafts via the analysis service:

    documents --build_competitor_prompt--> prompt
    prompt --AnalysisClient.generate--> free-form text
    text --find_json_object--> dict --parse_entry (per document)--> ParseResult

The service gives no schema guarantee. Its text may wrap the JSON object in
commentary or code fences, so the first balanced ``{...}`` span that decodes
is used. Each per-document entry is validated on its own: an insignificant or
invalid entry drops that document's draft and nothing else.

The brand-sentiment variant (parse_sentiment_response) repairs the
percentage triple so it sums to 100, with neutral absorbing the difference.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence

from constants import (
    DEFAULT_PRIORITY,
    INSIGHT_EXCERPT_CAP,
    INSIGHT_TYPES,
    PRIORITIES,
    SENTIMENTS,
)
from errors import AnalysisFailed

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Data types
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class InsightDraft:
    """Validated, not-yet-persisted insight for one scraped document."""
    platform: str
    raw_content: str
    summary: Optional[str]
    insight_type: str
    sentiment: str
    priority: str = DEFAULT_PRIORITY
    key_points: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    impact: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    public_opinion: Optional[Any] = None
    public_opinion_positive: int = 0
    public_opinion_negative: int = 0
    source_url: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Column mapping for database.Insight."""
        return {
            "platform": self.platform,
            "content": self.raw_content,
            "summary": self.summary,
            "insight_type": self.insight_type,
            "sentiment": self.sentiment,
            "priority": self.priority,
            "key_points": list(self.key_points),
            "recommendations": list(self.recommendations),
            "impact": self.impact,
            "tags": list(self.tags),
            "labels": list(self.labels),
            "public_opinion": self.public_opinion,
            "public_opinion_positive": self.public_opinion_positive,
            "public_opinion_negative": self.public_opinion_negative,
            "source_url": self.source_url,
        }


# Outcome tags for ParseResult
ACCEPTED = "accepted"
INSIGNIFICANT = "insignificant"
REJECTED = "rejected"


@dataclass
class ParseResult:
    """Outcome of validating one analysis entry."""
    status: str
    draft: Optional[InsightDraft] = None
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status == ACCEPTED


@dataclass
class SentimentAnalysis:
    positive: int
    neutral: int
    negative: int
    positive_summary: List[str] = field(default_factory=list)
    neutral_summary: List[str] = field(default_factory=list)
    negative_summary: List[str] = field(default_factory=list)


# ─────────────────────────────────────────────────────────────────────────────
# JSON extraction
# ─────────────────────────────────────────────────────────────────────────────


def iter_brace_spans(text: str) -> Iterator[str]:
    """Yield balanced top-level ``{...}`` spans in order of appearance.

    Braces inside JSON string literals (including escaped quotes) are ignored.
    """
    if not text:
        return
    depth = 0
    start = -1
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and depth > 0:
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[start:i + 1]
                start = -1


def find_json_object(text: str) -> Optional[Dict[str, Any]]:
    """First balanced span in *text* that decodes to a JSON object, else None."""
    for span in iter_brace_spans(text):
        try:
            value = json.loads(span)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(value, dict):
            return value
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Field coercion
# ─────────────────────────────────────────────────────────────────────────────


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes")
    return False


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_string_list(value: Any) -> List[str]:
    """Ordered list of non-empty strings; anything else becomes []."""
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def _as_percentage(value: Any) -> int:
    """Integer in 0..100; unparsable values become 0."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(str(value).strip().rstrip("%")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return max(0, min(100, int(round(number))))


def _enum_key(value: Any) -> str:
    return "_".join(str(value or "").strip().lower().replace("-", " ").split())


# ─────────────────────────────────────────────────────────────────────────────
# Competitor content analysis
# ─────────────────────────────────────────────────────────────────────────────


def build_competitor_prompt(competitor_name: str, documents: Sequence[Any]) -> str:
    """One request covering every document collected for a competitor."""
    sections = []
    for number, doc in enumerate(documents, start=1):
        sections.append(
            f"[Document {number}]\n"
            f"Platform: {doc.platform}\n"
            f"URL: {doc.url}\n"
            f"Content:\n{doc.content}"
        )
    joined = "\n\n".join(sections)

    return f"""You are a competitive intelligence analyst. Review the content collected from "{competitor_name}" and decide, for EACH document, whether it shows a significant competitive event (product launch, pricing change, new feature, campaign, executive hire, partnership, ...). Routine or unchanged boilerplate is not significant.

{joined}

Return ONLY one JSON object with this exact structure:
{{
  "results": [
    {{
      "document": <document number>,
      "hasSignificantUpdate": true | false,
      "summary": "2-3 sentence summary",
      "insightType": "{' | '.join(INSIGHT_TYPES)}",
      "sentiment": "{' | '.join(SENTIMENTS)}",
      "priority": "{' | '.join(PRIORITIES)}",
      "keyPoints": ["point 1", "point 2", "point 3"],
      "recommendations": ["recommendation 1", "recommendation 2"],
      "impact": "short narrative of the business impact",
      "tags": ["tag1", "tag2"],
      "labels": ["label1", "label2"],
      "publicOpinion": "one sentence on how the public is reacting",
      "publicOpinionPositive": <0-100 integer>,
      "publicOpinionNegative": <0-100 integer>
    }}
  ]
}}

Rules:
- Include one entry per document, using its document number.
- When hasSignificantUpdate is false the other fields may be omitted.
- publicOpinionPositive and publicOpinionNegative are independent estimates and do not need to sum to 100."""


def parse_entry(entry: Any, document: Any) -> ParseResult:
    """Validate one per-document analysis entry against the insight schema."""
    if not isinstance(entry, dict):
        return ParseResult(status=REJECTED, reason="entry is not an object")

    if not _as_bool(entry.get("hasSignificantUpdate")):
        return ParseResult(status=INSIGNIFICANT, reason="no significant update")

    insight_type = _enum_key(entry.get("insightType") or entry.get("type"))
    if insight_type not in INSIGHT_TYPES:
        return ParseResult(status=REJECTED, reason=f"invalid insightType {entry.get('insightType')!r}")

    sentiment = _enum_key(entry.get("sentiment"))
    if sentiment not in SENTIMENTS:
        return ParseResult(status=REJECTED, reason=f"invalid sentiment {entry.get('sentiment')!r}")

    priority = _enum_key(entry.get("priority"))
    if priority not in PRIORITIES:
        priority = DEFAULT_PRIORITY

    public_opinion = entry.get("publicOpinion")
    if not isinstance(public_opinion, (str, dict)):
        public_opinion = None

    draft = InsightDraft(
        platform=document.platform,
        raw_content=(document.content or "")[:INSIGHT_EXCERPT_CAP],
        summary=_as_text(entry.get("summary")),
        insight_type=insight_type,
        sentiment=sentiment,
        priority=priority,
        key_points=_as_string_list(entry.get("keyPoints")),
        recommendations=_as_string_list(entry.get("recommendations")),
        impact=_as_text(entry.get("impact")),
        tags=_as_string_list(entry.get("tags")),
        labels=_as_string_list(entry.get("labels")),
        public_opinion=public_opinion,
        public_opinion_positive=_as_percentage(entry.get("publicOpinionPositive")),
        public_opinion_negative=_as_percentage(entry.get("publicOpinionNegative")),
        source_url=document.url,
    )
    return ParseResult(status=ACCEPTED, draft=draft)


def _entries_by_document(payload: Dict[str, Any], document_count: int) -> Dict[int, Any]:
    """Map 0-based document index -> entry. First entry per document wins."""
    entries = payload.get("results")
    if entries is None and "hasSignificantUpdate" in payload:
        # Single bare result object
        entries = [payload]
    if not isinstance(entries, list):
        return {}

    mapped: Dict[int, Any] = {}
    for position, entry in enumerate(entries):
        number = entry.get("document", entry.get("index")) if isinstance(entry, dict) else None
        if number is None and document_count == 1:
            number = 1
        try:
            index = int(number) - 1
        except (TypeError, ValueError):
            logger.warning(f"Analysis entry {position} has no usable document number, dropped")
            continue
        if not 0 <= index < document_count:
            logger.warning(f"Analysis entry {position} references unknown document {number}, dropped")
            continue
        if index in mapped:
            logger.debug(f"Duplicate analysis entry for document {number}, keeping the first")
            continue
        mapped[index] = entry
    return mapped


def parse_competitor_response(response_text: str, documents: Sequence[Any]) -> List[ParseResult]:
    """One ParseResult per document, in document order."""
    payload = find_json_object(response_text)
    if payload is None:
        logger.warning(
            f"Analysis response contained no JSON object; dropping {len(documents)} document(s). "
            f"Response head: {(response_text or '')[:200]!r}"
        )
        return [ParseResult(status=REJECTED, reason="unparsable response") for _ in documents]

    entries = _entries_by_document(payload, len(documents))
    results = []
    for index, document in enumerate(documents):
        entry = entries.get(index)
        if entry is None:
            results.append(ParseResult(status=INSIGNIFICANT, reason="no entry returned"))
            continue
        result = parse_entry(entry, document)
        if result.status == REJECTED:
            logger.warning(f"Rejected analysis for {document.platform} {document.url}: {result.reason}")
        results.append(result)
    return results


async def analyze(client: Any, competitor_name: str, documents: Sequence[Any]) -> List[InsightDraft]:
    """Analyze every document in one round-trip and return the accepted drafts.

    Raises whatever the client raises for transport-level failures
    (AnalysisNotConfigured, AnalysisFailed); per-document problems only drop
    that document.
    """
    if not documents:
        return []

    prompt = build_competitor_prompt(competitor_name, documents)
    response_text = await client.generate(prompt)
    results = parse_competitor_response(response_text, documents)

    drafts = [r.draft for r in results if r.accepted]
    logger.info(
        f"Analysis for {competitor_name}: {len(drafts)} draft(s) from {len(documents)} document(s) "
        f"({sum(1 for r in results if r.status == REJECTED)} rejected)"
    )
    return drafts


# ─────────────────────────────────────────────────────────────────────────────
# Brand sentiment analysis
# ─────────────────────────────────────────────────────────────────────────────


def build_sentiment_prompt(comments: Sequence[Dict[str, Any]]) -> str:
    lines = "\n".join(
        f"{i}. [{c.get('platform', 'unknown')}] {c.get('text', '')}"
        for i, c in enumerate(comments, start=1)
    )
    return f"""Analyze the sentiment of the following social media comments and provide a detailed breakdown.

Comments:
{lines}

Return ONLY a valid JSON object (no markdown, no code blocks) with this exact structure:
{{
  "sentimentBreakdown": {{
    "positive": <percentage as integer>,
    "neutral": <percentage as integer>,
    "negative": <percentage as integer>
  }},
  "positiveSummary": ["key point 1", "key point 2", "key point 3"],
  "neutralSummary": ["key point 1", "key point 2", "key point 3"],
  "negativeSummary": ["key point 1", "key point 2", "key point 3"]
}}

Requirements:
- positive + neutral + negative must equal exactly 100
- Each summary should contain 3-5 key points
- Summaries should be concise and actionable"""


def repair_breakdown(positive: Any, neutral: Any, negative: Any) -> tuple:
    """Force the triple to sum to 100 by moving the difference into neutral.

    Positive and negative are kept as given. Only when they alone exceed 100
    (so neutral would go below zero) are they scaled down to fill 100 with a
    zero neutral bucket.
    """
    pos = _as_percentage(positive)
    neu = _as_percentage(neutral)
    neg = _as_percentage(negative)

    neu += 100 - (pos + neu + neg)
    if neu < 0:
        total = pos + neg
        pos = int(round(pos * 100 / total))
        neg = 100 - pos
        neu = 0
    return pos, neu, neg


def parse_sentiment_response(response_text: str) -> Optional[SentimentAnalysis]:
    """Parse and repair a brand-sentiment response; None when unusable."""
    payload = find_json_object(response_text)
    if payload is None:
        return None
    breakdown = payload.get("sentimentBreakdown")
    if not isinstance(breakdown, dict) or not any(
        k in breakdown for k in ("positive", "neutral", "negative")
    ):
        return None

    pos, neu, neg = repair_breakdown(
        breakdown.get("positive"), breakdown.get("neutral"), breakdown.get("negative")
    )
    return SentimentAnalysis(
        positive=pos,
        neutral=neu,
        negative=neg,
        positive_summary=_as_string_list(payload.get("positiveSummary")),
        neutral_summary=_as_string_list(payload.get("neutralSummary")),
        negative_summary=_as_string_list(payload.get("negativeSummary")),
    )


async def analyze_sentiment(client: Any, comments: Sequence[Dict[str, Any]]) -> SentimentAnalysis:
    """Run the brand-sentiment analysis; AnalysisFailed when the reply is unusable."""
    response_text = await client.generate(build_sentiment_prompt(comments))
    analysis = parse_sentiment_response(response_text)
    if analysis is None:
        logger.warning(f"Unusable sentiment response: {(response_text or '')[:200]!r}")
        raise AnalysisFailed("Failed to analyze sentiment")
    return analysis

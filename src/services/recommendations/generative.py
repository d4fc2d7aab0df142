"""Generative recommendations: prompt a language model with recent history and parse its picks."""

import asyncio
import json
import logging
import random
import re
from typing import Any, Protocol

from pydantic import ValidationError

from src.constants import (
    API_TIMEOUT_DEFAULT,
    API_TIMEOUT_GENERATIVE,
    GENERATIVE_BASE_MAX,
    GENERATIVE_BASE_MIN,
    GENERATIVE_BASE_PER_ITEM,
    GENERATIVE_CONFIDENCE_HIGH,
    GENERATIVE_CONFIDENCE_LOW,
    GENERATIVE_JITTER,
    GENERATIVE_POSITION_PENALTY,
    RECENT_HISTORY_LIMIT,
)
from src.models.content import ContentCategory
from src.models.schemas import Candidate, CandidateSource
from src.services.recommendations.classifier import classify_candidate
from src.services.recommendations.matching import dedupe_candidates, filter_owned
from src.services.recommendations.prompting import build_prompt
from src.services.recommendations.store import ContentStore
from src.utils.logging import LogContext

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_YEAR = re.compile(r"\b(1[89]|20)\d{2}\b")

POSTER_CATEGORIES = (ContentCategory.MOVIE, ContentCategory.TV_SHOW)


class GenerativeClient(Protocol):
    """Text-in, text-out model provider."""

    @property
    def is_configured(self) -> bool: ...

    async def generate(self, prompt: str) -> str: ...


class ImageLookup(Protocol):
    """Best-effort poster / cover lookup."""

    async def find_image_for_title(self, title: str, category: ContentCategory) -> str | None: ...


def parse_generative_response(text: str | None) -> list[dict[str, Any]]:
    """Extract the JSON array from a model response.

    Markdown fences and surrounding prose are stripped. Anything that does
    not parse into a list yields an empty list.
    """
    if not text:
        return []

    cleaned = _CODE_FENCE.sub("", text).strip()
    start = cleaned.find("[")
    if start == -1:
        logger.warning("Generative response contains no JSON array")
        return []

    # Decoding stops where the array ends, so trailing prose may contain brackets
    decoder = json.JSONDecoder()
    error: json.JSONDecodeError | None = None
    while start != -1:
        try:
            payload, _ = decoder.raw_decode(cleaned, start)
        except json.JSONDecodeError as e:
            error = error or e
        else:
            if isinstance(payload, list):
                return [obj for obj in payload if isinstance(obj, dict)]
        start = cleaned.find("[", start + 1)

    logger.warning(f"Could not parse generative response: {error}")
    return []


def parse_year(value: Any) -> int | None:
    """Extract a year from ints, "2010", "2010-2015", "c. 1994"."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _YEAR.search(value)
        return int(match.group()) if match else None
    return None


def parse_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _text(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value)
    value = str(value).strip()
    return value or None


def candidate_from_generated(raw: dict[str, Any], category: ContentCategory) -> Candidate | None:
    """Build a candidate from one generated object, or None if it is not a ``category`` item."""
    kind = classify_candidate(raw, expected=category)
    if kind.category != category:
        logger.debug(f"Dropping generated object classified as {kind.value}, wanted {category.value}")
        return None

    fields: dict[str, Any] = {
        "type": category,
        "confidence": 0.0,
        "source": CandidateSource.GENERATIVE,
        "reason": _text(raw, "reason") or "Picked for you based on your recent ratings",
    }
    if category == ContentCategory.RESTAURANT:
        fields.update(
            name=_text(raw, "name") or _text(raw, "title"),
            cuisine=_text(raw, "cuisine"),
            location=_text(raw, "location"),
            venue_type=_text(raw, "type"),
        )
    else:
        fields.update(title=_text(raw, "title"), year=parse_year(raw.get("year")), genre=_text(raw, "genre"))
        if category == ContentCategory.MOVIE:
            fields["director"] = _text(raw, "director")
        elif category == ContentCategory.TV_SHOW:
            fields["seasons"] = parse_count(raw.get("seasons"))
        else:
            fields.update(artist=_text(raw, "artist"), album=_text(raw, "album"))

    try:
        return Candidate(**fields)
    except ValidationError as e:
        logger.debug(f"Dropping invalid generated object: {e}")
        return None


def generative_confidence(history_count: int, position: int, rng: random.Random) -> float:
    """clamp(base - position penalty + jitter).

    The base grows with the amount of rated history the prompt was built
    from; later positions in the model's answer score lower.
    """
    base = min(GENERATIVE_BASE_MIN + GENERATIVE_BASE_PER_ITEM * history_count, GENERATIVE_BASE_MAX)
    jitter = rng.uniform(-GENERATIVE_JITTER, GENERATIVE_JITTER)
    score = base - GENERATIVE_POSITION_PENALTY * position + jitter
    return min(max(score, GENERATIVE_CONFIDENCE_LOW), GENERATIVE_CONFIDENCE_HIGH)


class GenerativeRecommender:
    """Asks a generative model for suggestions seeded by the user's recent ratings."""

    def __init__(
        self,
        store: ContentStore,
        client: GenerativeClient | None,
        image_lookup: ImageLookup | None = None,
        rng: random.Random | None = None,
        timeout: float = API_TIMEOUT_GENERATIVE,
        image_timeout: float = API_TIMEOUT_DEFAULT,
        history_limit: int = RECENT_HISTORY_LIMIT,
    ):
        self.store = store
        self.client = client
        self.image_lookup = image_lookup
        self.rng = rng or random.Random()
        self.timeout = timeout
        self.image_timeout = image_timeout
        self.history_limit = history_limit

    @property
    def is_available(self) -> bool:
        return self.client is not None and self.client.is_configured

    async def recommend(self, user_id: int, category: ContentCategory, limit: int) -> list[Candidate]:
        log = LogContext(logger, user_id=user_id, category=category.value, tier="generative")
        if limit <= 0 or not self.is_available:
            return []

        items = await self.store.get_rated_items(user_id, category)
        recent = sorted(items, key=lambda i: i.created_at, reverse=True)[: self.history_limit]
        prompt = build_prompt(category, recent, limit)

        try:
            text = await asyncio.wait_for(self.client.generate(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            log.warning(f"Model call timed out after {self.timeout:.1f}s")
            return []
        except Exception as e:
            log.warning(f"Model call failed: {type(e).__name__}: {e}")
            return []

        parsed = parse_generative_response(text)
        if not parsed:
            log.info("Model returned no usable suggestions")
            return []

        candidates = [c for c in (candidate_from_generated(raw, category) for raw in parsed) if c]
        candidates = dedupe_candidates(candidates)
        candidates = await filter_owned(self.store, user_id, candidates)
        candidates = candidates[:limit]

        if category in POSTER_CATEGORIES and self.image_lookup is not None:
            candidates = await self._attach_images(candidates, category)

        scored = [
            c.model_copy(update={"confidence": generative_confidence(len(items), position, self.rng)})
            for position, c in enumerate(candidates)
        ]
        log.info(f"{len(scored)} generative suggestions from {len(parsed)} parsed objects")
        return scored

    async def _attach_images(self, candidates: list[Candidate], category: ContentCategory) -> list[Candidate]:
        images = await asyncio.gather(*(self._find_image(c.display_title, category) for c in candidates))
        return [
            c.model_copy(update={"image_url": image}) if image and not c.image_url else c
            for c, image in zip(candidates, images)
        ]

    async def _find_image(self, title: str, category: ContentCategory) -> str | None:
        try:
            return await asyncio.wait_for(
                self.image_lookup.find_image_for_title(title, category),
                timeout=self.image_timeout,
            )
        except Exception as e:
            logger.debug(f"Poster lookup failed for '{title}': {type(e).__name__}: {e}")
            return None

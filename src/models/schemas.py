"""Pydantic schemas for taste profiles, candidates and activity payloads."""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from src.constants import TASTE_VECTOR_DIM
from src.models.content import ContentCategory


# Taste profile
class TasteProfile(BaseModel):
    """Aggregated taste of one user."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    movie_genres: dict[str, float] = Field(default_factory=dict)
    music_genres: dict[str, float] = Field(default_factory=dict)
    cuisine_types: dict[str, float] = Field(default_factory=dict)
    personality_tags: list[str] = Field(default_factory=list)
    taste_vector: list[float] = Field(default_factory=lambda: [0.0] * TASTE_VECTOR_DIM)
    last_analyzed: datetime

    @field_validator("taste_vector")
    @classmethod
    def validate_vector_length(cls, v: list[float]) -> list[float]:
        """The vector layout is fixed; anything else cannot be compared."""
        if len(v) != TASTE_VECTOR_DIM:
            raise ValueError(f"taste_vector must have {TASTE_VECTOR_DIM} entries, got {len(v)}")
        return v

    @property
    def category_frequencies(self) -> dict[str, dict[str, float]]:
        return {
            "movie": self.movie_genres,
            "music": self.music_genres,
            "cuisine": self.cuisine_types,
        }


# Similar users
class SimilarUser(BaseModel):
    """A neighbor in taste space."""

    user_id: int
    display_name: str | None = None
    similarity: float

    @computed_field
    @property
    def match_percent(self) -> int:
        return round(self.similarity * 100)


# Candidates
class CandidateSource(str, enum.Enum):
    """Where a candidate came from."""

    GENERATIVE = "generative"
    COLLABORATIVE = "collaborative"
    DISCOVERY_API = "discovery-api"
    CURATED = "curated"


class Candidate(BaseModel):
    """A single recommendation, built fresh for each request."""

    type: ContentCategory

    # Movies / TV shows / music
    title: str | None = None
    year: int | None = None
    genre: str | None = None
    director: str | None = None
    seasons: int | None = None
    artist: str | None = None
    album: str | None = None

    # Restaurants
    name: str | None = None
    cuisine: str | None = None
    location: str | None = None
    venue_type: str | None = None

    image_url: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    source: CandidateSource
    reason: str = ""
    from_user: SimilarUser | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.name or ""


# Activity
class ActivityEntry(BaseModel):
    """Item recently logged by a similar user."""

    user_id: int
    display_name: str | None = None
    type: ContentCategory
    title: str
    artist: str | None = None
    genre: str | None = None
    cuisine: str | None = None
    rating: float | None = None
    created_at: datetime
    similarity: float


class SimilarUsersActivity(BaseModel):
    """Recent activity of similar users."""

    activities: list[ActivityEntry] = Field(default_factory=list)
    similar_users: list[SimilarUser] = Field(default_factory=list)


class MostPopular(BaseModel):
    type: ContentCategory
    title: str
    count: int


class WeeklySummary(BaseModel):
    """What the closest neighbors logged during the last week."""

    similar_user_count: int
    total_activities: int
    movie_count: int = 0
    tv_show_count: int = 0
    music_count: int = 0
    restaurant_count: int = 0
    most_popular: MostPopular | None = None
    top_users: list[str] = Field(default_factory=list)

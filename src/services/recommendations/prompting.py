"""Prompt construction for generative recommendations."""

from src.models.content import ContentCategory
from src.services.recommendations.store import RatedItem

CATEGORY_NOUNS = {
    ContentCategory.MOVIE: ("movie", "movies"),
    ContentCategory.TV_SHOW: ("TV show", "TV shows"),
    ContentCategory.MUSIC: ("song", "songs"),
    ContentCategory.RESTAURANT: ("restaurant", "restaurants"),
}

# One example object per category; keys are the fields the parser reads back
RESPONSE_FORMATS = {
    ContentCategory.MOVIE: (
        '{"title": "Movie title", "year": 2010, "genre": "Genre1, Genre2", '
        '"director": "Director", "reason": "Why it fits (one sentence)"}'
    ),
    ContentCategory.TV_SHOW: (
        '{"title": "Show title", "year": 2008, "genre": "Genre1, Genre2", '
        '"seasons": 5, "reason": "Why it fits (one sentence)"}'
    ),
    ContentCategory.MUSIC: (
        '{"title": "Song title", "artist": "Artist", "album": "Album", '
        '"genre": "Genre1, Genre2", "reason": "Why it fits (one sentence)"}'
    ),
    ContentCategory.RESTAURANT: (
        '{"name": "Place name", "type": "restaurant", "cuisine": "Cuisine", '
        '"location": "City", "reason": "Why it fits (one sentence)"}'
    ),
}


def describe_item(item: RatedItem) -> str:
    """One history line, e.g. ``Inception (2010) - Sci-Fi, Thriller - rated 5/5``."""
    rating = f"rated {item.rating:g}/5" if item.rating is not None else "not rated"

    if item.category == ContentCategory.MUSIC:
        head = f"{item.artist} - {item.title}" if item.artist else item.title
        if item.album:
            head += f" [{item.album}]"
        tags = item.genre
    elif item.category == ContentCategory.RESTAURANT:
        head = f"{item.title}, {item.location}" if item.location else item.title
        tags = item.cuisine
    else:
        head = f"{item.title} ({item.year})" if item.year else item.title
        tags = item.genre

    parts = [head]
    if tags:
        parts.append(tags)
    parts.append(rating)
    return " - ".join(parts)


def build_prompt(category: ContentCategory, recent_items: list[RatedItem], limit: int) -> str:
    """Prompt asking for ``limit`` new suggestions as a JSON array.

    With no history the prompt asks for well-known, high-quality picks
    instead of personalized ones.
    """
    singular, plural = CATEGORY_NOUNS[category]
    lines = [f"You are an expert {singular} recommender."]

    if recent_items:
        lines += [
            "",
            f"The user recently rated these {plural} (most recent first):",
            *(f"- {describe_item(item)}" for item in recent_items),
            "",
            f"Suggest {limit} new {plural} this user is likely to enjoy.",
            "Do not repeat anything from the list above.",
            "In each reason, tie the pick back to specific entries of the list.",
        ]
    else:
        lines += [
            "",
            f"The user has not rated any {plural} yet.",
            f"Suggest {limit} popular, widely acclaimed {plural} that make a good starting point.",
            "In each reason, say briefly why it is a safe first pick.",
        ]

    lines += [
        "",
        "Rules:",
        "1. Answer with a JSON array only, no prose and no markdown.",
        f"2. Exactly {limit} objects, no duplicates, each shaped like:",
        f"   {RESPONSE_FORMATS[category]}",
        "3. Only suggest real, existing items.",
        "4. Keep each reason under 25 words.",
    ]
    return "\n".join(lines)

"""Hand-maintained catalog of well-known items, the last fallback tier.

Entries are grouped by label so that users with known preferences get
matching picks first.
"""

from typing import Any

from src.models.content import ContentCategory

CURATED_CATALOG: dict[ContentCategory, dict[str, list[dict[str, Any]]]] = {
    ContentCategory.MOVIE: {
        "Drama": [
            {"title": "The Shawshank Redemption", "year": 1994, "genre": "Drama", "director": "Frank Darabont"},
            {"title": "Forrest Gump", "year": 1994, "genre": "Drama, Romance", "director": "Robert Zemeckis"},
            {"title": "Parasite", "year": 2019, "genre": "Drama, Thriller", "director": "Bong Joon-ho"},
        ],
        "Sci-Fi": [
            {"title": "Inception", "year": 2010, "genre": "Sci-Fi, Thriller", "director": "Christopher Nolan"},
            {"title": "Interstellar", "year": 2014, "genre": "Sci-Fi, Adventure", "director": "Christopher Nolan"},
            {"title": "Blade Runner 2049", "year": 2017, "genre": "Sci-Fi, Drama", "director": "Denis Villeneuve"},
        ],
        "Action": [
            {"title": "The Dark Knight", "year": 2008, "genre": "Action, Crime", "director": "Christopher Nolan"},
            {"title": "Mad Max: Fury Road", "year": 2015, "genre": "Action, Adventure", "director": "George Miller"},
        ],
        "Comedy": [
            {"title": "The Grand Budapest Hotel", "year": 2014, "genre": "Comedy, Drama", "director": "Wes Anderson"},
            {"title": "Groundhog Day", "year": 1993, "genre": "Comedy, Romance", "director": "Harold Ramis"},
        ],
        "Thriller": [
            {"title": "Pulp Fiction", "year": 1994, "genre": "Crime, Thriller", "director": "Quentin Tarantino"},
            {"title": "Se7en", "year": 1995, "genre": "Thriller, Crime", "director": "David Fincher"},
        ],
        "Horror": [
            {"title": "Get Out", "year": 2017, "genre": "Horror, Thriller", "director": "Jordan Peele"},
            {"title": "The Shining", "year": 1980, "genre": "Horror", "director": "Stanley Kubrick"},
        ],
        "Animation": [
            {"title": "Spirited Away", "year": 2001, "genre": "Animation, Adventure", "director": "Hayao Miyazaki"},
        ],
    },
    ContentCategory.TV_SHOW: {
        "Drama": [
            {"title": "Breaking Bad", "year": 2008, "genre": "Crime, Drama", "seasons": 5},
            {"title": "The Sopranos", "year": 1999, "genre": "Crime, Drama", "seasons": 6},
            {"title": "Succession", "year": 2018, "genre": "Drama", "seasons": 4},
        ],
        "Comedy": [
            {"title": "The Office", "year": 2005, "genre": "Comedy", "seasons": 9},
            {"title": "Friends", "year": 1994, "genre": "Comedy, Romance", "seasons": 10},
            {"title": "Fleabag", "year": 2016, "genre": "Comedy, Drama", "seasons": 2},
        ],
        "Sci-Fi": [
            {"title": "Stranger Things", "year": 2016, "genre": "Sci-Fi, Horror", "seasons": 4},
            {"title": "Black Mirror", "year": 2011, "genre": "Sci-Fi, Thriller", "seasons": 6},
        ],
        "Fantasy": [
            {"title": "Game of Thrones", "year": 2011, "genre": "Fantasy, Drama", "seasons": 8},
        ],
        "Documentary": [
            {"title": "Planet Earth", "year": 2006, "genre": "Documentary", "seasons": 1},
        ],
    },
    ContentCategory.MUSIC: {
        "Rock": [
            {"title": "Bohemian Rhapsody", "artist": "Queen", "album": "A Night at the Opera", "genre": "Rock"},
            {"title": "Hotel California", "artist": "Eagles", "album": "Hotel California", "genre": "Rock"},
            {"title": "Stairway to Heaven", "artist": "Led Zeppelin", "album": "Led Zeppelin IV", "genre": "Rock"},
        ],
        "Pop": [
            {"title": "Billie Jean", "artist": "Michael Jackson", "album": "Thriller", "genre": "Pop"},
            {"title": "Imagine", "artist": "John Lennon", "album": "Imagine", "genre": "Pop, Rock"},
        ],
        "Hip-Hop": [
            {"title": "Lose Yourself", "artist": "Eminem", "album": "8 Mile", "genre": "Hip-Hop"},
            {"title": "Alright", "artist": "Kendrick Lamar", "album": "To Pimp a Butterfly", "genre": "Hip-Hop"},
        ],
        "Electronic": [
            {"title": "One More Time", "artist": "Daft Punk", "album": "Discovery", "genre": "Electronic"},
        ],
        "Jazz": [
            {"title": "So What", "artist": "Miles Davis", "album": "Kind of Blue", "genre": "Jazz"},
            {"title": "Take Five", "artist": "The Dave Brubeck Quartet", "album": "Time Out", "genre": "Jazz"},
        ],
        "Classical": [
            {"title": "Clair de Lune", "artist": "Claude Debussy", "album": "Suite bergamasque", "genre": "Classical"},
        ],
        "Alternative": [
            {"title": "Paranoid Android", "artist": "Radiohead", "album": "OK Computer", "genre": "Alternative"},
        ],
    },
    ContentCategory.RESTAURANT: {
        "Turkish": [
            {"name": "Pandeli", "cuisine": "Turkish", "location": "Istanbul", "venue_type": "restaurant"},
            {"name": "Çiya Sofrası", "cuisine": "Turkish", "location": "Istanbul", "venue_type": "restaurant"},
            {"name": "Hamdi Restaurant", "cuisine": "Turkish", "location": "Istanbul", "venue_type": "restaurant"},
            {"name": "Karaköy Lokantası", "cuisine": "Turkish", "location": "Istanbul", "venue_type": "restaurant"},
        ],
        "Mediterranean": [
            {"name": "Mikla", "cuisine": "Mediterranean", "location": "Istanbul", "venue_type": "restaurant"},
        ],
        "Japanese": [
            {"name": "Zuma", "cuisine": "Japanese", "location": "Istanbul", "venue_type": "restaurant"},
        ],
        "Italian": [
            {"name": "Locale Firenze", "cuisine": "Italian", "location": "Istanbul", "venue_type": "restaurant"},
        ],
        "American": [
            {"name": "Sunset Grill & Bar", "cuisine": "International", "location": "Istanbul", "venue_type": "bar"},
        ],
    },
}


def curated_entries(category: ContentCategory, preferred_labels: list[str] | None = None) -> list[dict[str, Any]]:
    """Catalog entries for ``category``, preferred labels' groups first.

    Each entry is returned once, tagged with the label group it came from.
    """
    groups = CURATED_CATALOG.get(category, {})
    preferred = [label.casefold() for label in preferred_labels or []]

    def rank(label: str) -> int:
        folded = label.casefold()
        return preferred.index(folded) if folded in preferred else len(preferred)

    ordered = sorted(groups, key=rank)  # stable: unmatched groups keep catalog order
    return [
        {**entry, "label": label, "is_preferred": label.casefold() in preferred}
        for label in ordered
        for entry in groups[label]
    ]

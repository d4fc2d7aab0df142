"""Application constants - centralized configuration values."""

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
API_TIMEOUT_DEFAULT = 5.0
API_TIMEOUT_GENERATIVE = 8.0
HTTPX_TIMEOUT = 5.0

# =============================================================================
# External API URLs
# =============================================================================
TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
LASTFM_API_URL = "https://ws.audioscrobbler.com/2.0/"
FOURSQUARE_API_URL = "https://api.foursquare.com/v3/places/search"

# Foursquare "Dining and Drinking > Restaurant" category
FOURSQUARE_RESTAURANT_CATEGORY = "13065"

# =============================================================================
# Taste vector layout (order is fixed system-wide)
# =============================================================================
MOVIE_GENRE_SLOTS = (
    "Action", "Drama", "Comedy", "Horror", "Romance",
    "Sci-Fi", "Thriller", "Adventure", "Animation", "Documentary",
)
MUSIC_GENRE_SLOTS = (
    "Rock", "Pop", "Hip-Hop", "Electronic", "Classical",
    "Jazz", "Country", "R&B", "Folk", "Alternative",
)
CUISINE_SLOTS = (
    "Italian", "Asian", "Mexican", "American", "French",
    "Indian", "Mediterranean", "Japanese", "Thai", "Chinese",
)
TASTE_VECTOR_DIM = len(MOVIE_GENRE_SLOTS) + len(MUSIC_GENRE_SLOTS) + len(CUISINE_SLOTS)

# Spelling variants folded onto a slot label
LABEL_ALIASES = {
    "science fiction": "Sci-Fi",
    "sci fi": "Sci-Fi",
    "scifi": "Sci-Fi",
    "hip hop": "Hip-Hop",
    "hiphop": "Hip-Hop",
    "rap": "Hip-Hop",
    "rnb": "R&B",
    "r'n'b": "R&B",
    "rhythm and blues": "R&B",
    "electronica": "Electronic",
    "edm": "Electronic",
    "documentaries": "Documentary",
    "animated": "Animation",
}

# =============================================================================
# Similarity
# =============================================================================
ACTIVITY_FEED_MIN_SIMILARITY = 0.5
ACTIVITY_FEED_NEIGHBORS = 10
WEEKLY_SUMMARY_MIN_SIMILARITY = 0.6
WEEKLY_SUMMARY_NEIGHBORS = 3
COLLABORATIVE_MIN_SIMILARITY = 0.0
COLLABORATIVE_NEIGHBORS = 3
COLLABORATIVE_ITEMS_PER_NEIGHBOR = 2
COLLABORATIVE_DAMPING = 0.8

# =============================================================================
# Recommendation sizing
# =============================================================================
DEFAULT_RECOMMENDATION_LIMIT = 10
SINGLE_SOURCE_LIMIT = 8
GENERATIVE_SHARE = 0.7
RECENT_HISTORY_LIMIT = 5
PREFERRED_LABELS_LIMIT = 3

# =============================================================================
# Confidence bands
# =============================================================================
GENERATIVE_BASE_MIN = 0.55
GENERATIVE_BASE_PER_ITEM = 0.05
GENERATIVE_BASE_MAX = 0.90
GENERATIVE_POSITION_PENALTY = 0.05
GENERATIVE_JITTER = 0.03
GENERATIVE_CONFIDENCE_LOW = 0.30
GENERATIVE_CONFIDENCE_HIGH = 0.95

PREFERENCE_TIER_BASE = 0.70
PREFERENCE_TIER_FLOOR = 0.50
POPULAR_TIER_BASE = 0.55
POPULAR_TIER_FLOOR = 0.35
CURATED_TIER_BASE = 0.30
CURATED_TIER_FLOOR = 0.20
DISCOVERY_POSITION_STEP = 0.02
CURATED_POSITION_STEP = 0.01

# Minimum external quality for preference-aware discovery
TMDB_MIN_VOTE_AVERAGE = 7.0
TMDB_MIN_VOTE_COUNT = 100
FOURSQUARE_MIN_RATING = 7.5

# =============================================================================
# Activity feed
# =============================================================================
ACTIVITY_DEFAULT_DAYS = 7
ACTIVITY_ITEMS_PER_CATEGORY = 20
ACTIVITY_FEED_MAX_ITEMS = 50

# =============================================================================
# Personality tags: (domain, label, threshold, tag)
# =============================================================================
PERSONALITY_RULES = (
    ("movie", "Action", 0.3, "action-lover"),
    ("movie", "Drama", 0.4, "drama-enthusiast"),
    ("movie", "Comedy", 0.3, "comedy-fan"),
    ("movie", "Horror", 0.2, "thrill-seeker"),
    ("music", "Rock", 0.3, "rock-head"),
    ("music", "Classical", 0.2, "sophisticated"),
    ("music", "Electronic", 0.3, "tech-savvy"),
    ("cuisine", "Italian", 0.3, "italian-food-lover"),
    ("cuisine", "Asian", 0.3, "asian-cuisine-fan"),
    ("cuisine", "Mexican", 0.2, "spice-lover"),
)
VERY_ACTIVE_ITEMS = 100
ACTIVE_ITEMS = 50

"""
Aether Intel - Shared Constants

Centralizes version string, enumerations and size caps used across the
scrape pipeline, the analysis adapter and the API routers.
"""

__version__ = "1.4.0"

# =============================================================================
# ENUMERATIONS
# =============================================================================

INSIGHT_TYPES = (
    "product_launch",
    "feature_update",
    "pricing_change",
    "marketing_campaign",
    "executive_hire",
    "partnership",
    "other",
)

SENTIMENTS = ("threat", "opportunity", "neutral")

PRIORITIES = ("high", "medium", "low")
DEFAULT_PRIORITY = "medium"

COMPETITOR_STATUSES = ("active", "paused")
MONITORING_FREQUENCIES = ("realtime", "daily", "weekly")

SOCIAL_PLATFORMS = (
    "linkedin",
    "twitter",
    "facebook",
    "instagram",
    "reddit",
    "bluesky",
    "truthsocial",
)

# Alternate spellings users type into the dashboard
PLATFORM_ALIASES = {
    "x": "twitter",
    "truth social": "truthsocial",
    "truth_social": "truthsocial",
    "bsky": "bluesky",
}

# Canonical profile URL per platform; {handle} is substituted verbatim
PROFILE_URL_TEMPLATES = {
    "linkedin": "https://www.linkedin.com/company/{handle}",
    "twitter": "https://twitter.com/{handle}",
    "facebook": "https://www.facebook.com/{handle}",
    "instagram": "https://www.instagram.com/{handle}",
    "reddit": "https://www.reddit.com/user/{handle}",
    "bluesky": "https://bsky.app/profile/{handle}",
    "truthsocial": "https://truthsocial.com/@{handle}",
}

WEBSITE_PLATFORM = "website"

# =============================================================================
# SIZE CAPS
# =============================================================================

WEBSITE_CONTENT_CAP = 5000
SOCIAL_CONTENT_CAP = 3000
INSIGHT_EXCERPT_CAP = 1000

# Brand-sentiment collection bounds
YOUTUBE_MAX_VIDEOS = 10
YOUTUBE_MAX_COMMENTS_PER_VIDEO = 50
YOUTUBE_MAX_TOTAL_COMMENTS = 500
REDDIT_MAX_POSTS = 100

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; AetherBot/1.0)"

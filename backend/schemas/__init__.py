"""
Aether Intel - Pydantic Schema Models

Organized by domain for use across routers and main.py.
"""

from schemas.common import (  # noqa: F401
    CamelModel,
    WriteModel,
    ErrorResponse,
    MessageResponse,
)
from schemas.competitors import (  # noqa: F401
    CompetitorCreate,
    CompetitorUpdate,
    CompetitorResponse,
)
from schemas.social_accounts import (  # noqa: F401
    SocialAccountCreate,
    SocialAccountUpdate,
    SocialAccountResponse,
)
from schemas.insights import (  # noqa: F401
    InsightResponse,
    InsightCreate,
    InsightUpdate,
    ScanRequest,
    ScanResponse,
)
from schemas.sentiment import (  # noqa: F401
    SocialMediaHandles,
    SentimentScanRequest,
    SentimentBreakdown,
    SentimentScanResponse,
    UserSentimentResponse,
    LatestSentimentResponse,
)

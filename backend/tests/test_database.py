"""
Aether Intel - Database Model Tests

Tests cover:
- Owner-scoped competitor lookup
- Active social account listing
- Cascade deletes
- Latest brand-sentiment lookup
- User provisioning
"""
import pytest
import uuid
from datetime import datetime, timedelta

from conftest import create_competitor


# ==============================================================================
# Competitor scoping
# ==============================================================================

class TestCompetitorScoping:
    """get_competitor never returns another user's row."""

    def test_owner_can_load(self, db_session, user):
        from database import get_competitor

        competitor_id = create_competitor(user["id"], name="Scoped Co")
        competitor = get_competitor(db_session, competitor_id, user["id"])

        assert competitor is not None
        assert competitor.name == "Scoped Co"
        assert competitor.status == "active"
        assert competitor.monitoring_frequency == "daily"

    def test_other_user_gets_none(self, db_session, user, other_user):
        from database import get_competitor

        competitor_id = create_competitor(user["id"])
        assert get_competitor(db_session, competitor_id, other_user["id"]) is None

    def test_missing_id_gets_none(self, db_session, user):
        from database import get_competitor

        assert get_competitor(db_session, 987654321, user["id"]) is None


# ==============================================================================
# Social accounts
# ==============================================================================

class TestSocialAccounts:

    def test_only_active_accounts_in_creation_order(self, db_session, user):
        from database import list_active_social_accounts

        competitor_id = create_competitor(user["id"], accounts=[
            {"platform": "twitter", "handle": "first", "is_active": True},
            {"platform": "linkedin", "handle": "paused", "is_active": False},
            {"platform": "facebook", "handle": "second", "is_active": True},
        ])

        accounts = list_active_social_accounts(db_session, competitor_id)

        assert [a.handle for a in accounts] == ["first", "second"]

    def test_profile_url_property(self, db_session, user):
        from database import SocialAccount

        competitor_id = create_competitor(user["id"], accounts=[
            {"platform": "twitter", "handle": "acme"},
            {"platform": "linkedin", "handle": "acme", "url": "https://linkedin.com/company/acme-real"},
        ])
        accounts = db_session.query(SocialAccount).filter(
            SocialAccount.competitor_id == competitor_id
        ).order_by(SocialAccount.id).all()

        assert accounts[0].profile_url == "https://twitter.com/acme"
        assert accounts[1].profile_url == "https://linkedin.com/company/acme-real"


# ==============================================================================
# Cascades
# ==============================================================================

class TestCascadeDelete:

    def test_deleting_competitor_removes_accounts_and_insights(self, db_session, user):
        from database import Competitor, Insight, SocialAccount, insert_insight

        competitor_id = create_competitor(user["id"], accounts=[{"platform": "twitter", "handle": "acme"}])
        insert_insight(db_session, {
            "user_id": user["id"],
            "competitor_id": competitor_id,
            "insight_type": "other",
            "sentiment": "neutral",
        })

        db_session.delete(db_session.get(Competitor, competitor_id))
        db_session.commit()

        assert db_session.query(SocialAccount).filter(SocialAccount.competitor_id == competitor_id).count() == 0
        assert db_session.query(Insight).filter(Insight.competitor_id == competitor_id).count() == 0


# ==============================================================================
# Brand sentiment
# ==============================================================================

class TestUserSentiment:

    def _record(self, user_id, scraped_at, positive):
        return {
            "user_id": user_id,
            "scraped_at": scraped_at,
            "positive_percentage": positive,
            "neutral_percentage": 100 - positive,
            "negative_percentage": 0,
        }

    def test_latest_by_scrape_time(self, db_session, user):
        from database import get_latest_user_sentiment, insert_user_sentiment

        now = datetime.utcnow()
        insert_user_sentiment(db_session, self._record(user["id"], now, 70))
        insert_user_sentiment(db_session, self._record(user["id"], now - timedelta(days=1), 10))

        latest = get_latest_user_sentiment(db_session, user["id"])
        assert latest.positive_percentage == 70

    def test_none_when_user_has_no_scans(self, db_session, user):
        from database import get_latest_user_sentiment

        assert get_latest_user_sentiment(db_session, user["id"]) is None

    def test_scans_are_per_user(self, db_session, user, other_user):
        from database import get_latest_user_sentiment, insert_user_sentiment

        insert_user_sentiment(db_session, self._record(other_user["id"], datetime.utcnow(), 55))
        assert get_latest_user_sentiment(db_session, user["id"]) is None


# ==============================================================================
# Users
# ==============================================================================

class TestEnsureUser:

    def test_creates_then_reuses(self, db_session, engine):
        from database import User, ensure_user

        user_id = f"user_{uuid.uuid4().hex[:12]}"
        first = ensure_user(db_session, user_id, f"{user_id}@example.com")
        second = ensure_user(db_session, user_id)

        assert first.id == second.id == user_id
        assert db_session.query(User).filter(User.id == user_id).count() == 1

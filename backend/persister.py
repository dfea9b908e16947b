"""
Aether Intel - Insight Persister

Writes one Insight row per accepted draft, stamped and scoped to the
user/competitor. Inserts are independent: each draft is committed on its own,
and a failed insert is rolled back, logged and skipped without touching the
rows already stored.

No de-duplication against earlier scans is performed; every scan is an
independent observation.
"""

import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import Insight, insert_insight

logger = logging.getLogger(__name__)


def persist_insights(
    db: Session,
    user_id: str,
    competitor_id: int,
    drafts: Iterable,
) -> List[Insight]:
    """Insert *drafts* and return the rows that were actually stored."""
    stored: List[Insight] = []
    for draft in drafts:
        now = datetime.utcnow()
        record = draft.to_record()
        record.update(
            user_id=user_id,
            competitor_id=competitor_id,
            detected_at=now,
            created_at=now,
        )
        try:
            stored.append(insert_insight(db, record))
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Failed to store {record['insight_type']} insight from {record['platform']} "
                f"for competitor {competitor_id}: {e}"
            )
    return stored

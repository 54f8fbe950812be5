"""Per-user key/value preferences."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID, JSONType
from invest_tracker.utils.datetime_utils import utc_now_lambda


class UserSetting(Base):
    """JSON preference stored under a key, one row per (user, key)."""

    __tablename__ = "user_settings"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    setting_key = Column(String(100), nullable=False)
    setting_value = Column(JSONType, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "setting_key", name="uq_user_setting_key"),)

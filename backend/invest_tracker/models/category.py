"""Investment category model."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID
from invest_tracker.utils.datetime_utils import utc_now_lambda

DEFAULT_CATEGORY_COLOR = "#4CAF50"


class Category(Base):
    """
    Investment bucket owned by a single user (e.g. a fund, gold, a currency).

    Aggregation root for transactions, the derived holding and snapshots;
    those rows are removed with it.
    """

    __tablename__ = "categories"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    color = Column(String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_category_user_name"),)

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"

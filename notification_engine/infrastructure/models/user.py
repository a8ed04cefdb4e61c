"""SQLAlchemy model for the application users the engine notifies."""

from sqlalchemy import Column, String

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id


class UserModel(Base):
    """Contact details of a user, owned by the surrounding application."""

    __tablename__ = "app_user"

    id = Column(String(64), primary_key=True, default=generate_id)
    email = Column(String(120), nullable=True, index=True)
    full_name = Column(String(120), nullable=True)
    phone = Column(String(32), nullable=True)


__all__ = ["UserModel"]

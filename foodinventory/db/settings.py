from sqlalchemy import CheckConstraint, Column, Integer

from .database import Base

SETTINGS_ROW_ID = 1
DEFAULT_EXPIRY_WARNING_DAYS = 3


class AppSettings(Base):
    """Singleton row (id = 1) holding user-editable settings."""
    __tablename__ = "settings"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_settings_singleton"),
        CheckConstraint("expiry_warning_days >= 1", name="ck_settings_expiry_warning_days"),
    )

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    expiry_warning_days = Column(Integer, nullable=False, default=DEFAULT_EXPIRY_WARNING_DAYS)

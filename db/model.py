from sqlalchemy import (
    Integer,
    BigInteger,
    String,
    Text,
    Index,
    Boolean,
    DateTime,
    func,
)
from sqlalchemy.orm import mapped_column
from datetime import datetime
from .base import Base


class User(Base):
    __tablename__ = "users"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_id = mapped_column(BigInteger, nullable=False, unique=True)
    username = mapped_column(String(255), nullable=True)  # Telegram @username
    first_name = mapped_column(String(255), nullable=True)
    language = mapped_column(String(16), nullable=True)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())
    last_seen_at = mapped_column(DateTime, nullable=True)


class ChatMessage(Base):
    """Plain text messages users send to the bot."""
    __tablename__ = "messages"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_id = mapped_column(BigInteger, nullable=False, index=True)
    message = mapped_column(Text, nullable=False)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id = mapped_column(BigInteger, nullable=False)
    plan_id = mapped_column(String(32), nullable=False)
    start_date = mapped_column(DateTime, nullable=False)
    end_date = mapped_column(DateTime, nullable=False)
    is_active = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    # telegram_payment_charge_id for Stars payments
    transaction_id = mapped_column(String(255), nullable=False)
    created_at = mapped_column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())

    __table_args__ = (
        Index("idx_subscriptions_user_active", "user_id", "is_active"),
    )


class UsageStat(Base):
    """One counter per user, action and day; uniqueness is not enforced here."""
    __tablename__ = "usage_stats"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id = mapped_column(BigInteger, nullable=False)
    action_type = mapped_column(String(32), nullable=False)
    count = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_usage_stats_lookup", "user_id", "action_type", "created_at"),
    )

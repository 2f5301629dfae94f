"""User database models."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DBUser(Base):  # type: ignore
    """
    A registered user of the climate reporting app.

    +-------------------+--------------+------+-----+
    | Field             | Type         | Null | Key |
    +-------------------+--------------+------+-----+
    | id                | int          | NO   | PRI |
    | user_id           | varchar(36)  | NO   | UNI |
    | email             | varchar(255) | NO   | UNI |
    | name              | varchar(255) | NO   |     |
    | phone             | varchar(64)  | NO   |     |
    | password          | varchar(255) | NO   |     |
    | session_key       | varchar(128) | YES  | MUL |
    | reset_token_used  | tinyint(1)   | NO   |     |
    | reset_token_time  | datetime     | YES  |     |
    | created_at        | datetime     | NO   |     |
    +-------------------+--------------+------+-----+
    """

    __tablename__ = 'climate_users'
    __table_args__ = (
        Index('ix_climate_users_email', 'email', unique=True),
        Index('ix_climate_users_session_key', 'session_key'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=False)
    password = Column(String(255), nullable=False)
    """One-way password verifier. Never projected, never logged."""

    session_key = Column(String(128), nullable=True)
    reset_token_used = Column(Boolean, nullable=False, default=False)
    reset_token_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

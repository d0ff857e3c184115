# models.py
"""Database models and helpers for stored document templates."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    create_engine,
    String,
    Integer,
    Text,
    DateTime,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    sessionmaker,
)

from template_config import TemplateConfig

logger = logging.getLogger(__name__)


# -----------------------------
# SQLAlchemy base
# -----------------------------
class Base(DeclarativeBase):
    pass


# -----------------------------
# Tables
# -----------------------------
class DocumentTemplate(Base):
    """
    One saved template per owner (a user or business id chosen by the host).
    config_json holds the editor's JSON shape as-is; it is resolved at render time.
    """
    __tablename__ = "document_templates"
    __table_args__ = (UniqueConstraint("owner", name="uq_document_templates_owner"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    config_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def config_dict(self) -> dict:
        try:
            value = json.loads(self.config_json or "{}")
        except ValueError:
            logger.warning("Stored template for %s is not valid JSON", self.owner)
            return {}
        return value if isinstance(value, dict) else {}


# -----------------------------
# Engine / Session factory
# -----------------------------
def make_engine(db_url: str, echo: bool = False):
    """
    Create SQLAlchemy engine.
    Note: for SQLite the directory holding the file must already exist.
    """
    return create_engine(db_url, echo=echo, future=True)


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


# -----------------------------
# Template store
# -----------------------------
def _get_row(session, owner: str) -> Optional[DocumentTemplate]:
    return session.execute(
        select(DocumentTemplate).where(DocumentTemplate.owner == owner)
    ).scalar_one_or_none()


def load_template_config(session, owner: str) -> dict:
    """Stored template JSON for `owner`, or {} when none was saved."""
    row = _get_row(session, owner)
    return row.config_dict() if row else {}


def save_template_config(session, owner: str, config: dict | TemplateConfig) -> DocumentTemplate:
    """
    Insert or replace the owner's template. Only recognised keys are kept.
    Caller commits.
    """
    if not isinstance(config, TemplateConfig):
        config = TemplateConfig.from_mapping(config or {})
    payload = json.dumps(config.to_mapping(), sort_keys=True)

    row = _get_row(session, owner)
    if row is None:
        row = DocumentTemplate(owner=owner, config_json=payload)
        session.add(row)
    else:
        row.config_json = payload
    session.flush()
    return row

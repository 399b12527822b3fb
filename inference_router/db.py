"""SQLAlchemy models for the inference host catalog."""

import uuid
from typing import List

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Source(Base):
    """A logical data source of a model. Sources sharing ``set_name`` form a source set."""

    __tablename__ = "sources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model_id: Mapped[str] = mapped_column(String(255), nullable=False)
    set_name: Mapped[str] = mapped_column(String(255), nullable=False)

    inference_hosts: Mapped[List["InferenceHostOnSource"]] = relationship(
        "InferenceHostOnSource", back_populates="source", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_sources_model_set", "model_id", "set_name"),)


class InferenceHost(Base):
    """A registered inference backend, stored as ``scheme://host:port``."""

    __tablename__ = "inference_hosts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    host_url: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)

    sources: Mapped[List["InferenceHostOnSource"]] = relationship(
        "InferenceHostOnSource", back_populates="inference_host", cascade="all, delete-orphan"
    )


class InferenceHostOnSource(Base):
    """Many-to-many link between sources and inference hosts."""

    __tablename__ = "inference_hosts_on_sources"

    source_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sources.id", ondelete="CASCADE"), primary_key=True
    )
    inference_host_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("inference_hosts.id", ondelete="CASCADE"), primary_key=True
    )

    source: Mapped["Source"] = relationship("Source", back_populates="inference_hosts")
    inference_host: Mapped["InferenceHost"] = relationship(
        "InferenceHost", back_populates="sources"
    )

    __table_args__ = (UniqueConstraint("source_id", "inference_host_id"),)


def make_session_factory(database_url: str) -> tuple[AsyncEngine, async_sessionmaker]:
    """Create an async engine and a session factory bound to it."""
    engine = create_async_engine(database_url)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def init_catalog(engine: AsyncEngine) -> None:
    """Create the catalog tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

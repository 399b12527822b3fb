"""Host catalog — registered inference hosts per model, source and source set.

``HostSelector`` only depends on the ``HostCatalog`` and ``AccessPolicy``
protocols. ``SqlHostCatalog`` is the SQLAlchemy-backed implementation.
Store errors propagate to the caller untouched.
"""

import logging
from typing import Any, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from inference_router.db import InferenceHost, InferenceHostOnSource, Source
from inference_router.models import canonical_host_url

logger = logging.getLogger(__name__)


class SourceRecord(BaseModel):
    """A source together with the host URLs registered for it."""

    id: str
    model_id: str
    set_name: str
    host_urls: list[str] = []


class HostCatalog(Protocol):
    async def hosts_for_model(self, model_id: str) -> list[str]: ...

    async def hosts_for_source_set(self, model_id: str, set_name: str) -> list[str]: ...

    async def get_source(self, source_id: str) -> Optional[SourceRecord]: ...

    async def source_set_exists(self, model_id: str, set_name: str) -> bool: ...


class AccessPolicy(Protocol):
    async def can_access(
        self, model_id: str, set_name: str, user: Optional[Any] = None
    ) -> bool: ...


def _host_urls(sources: list[Source]) -> list[str]:
    """Flatten the hosts of several sources. Duplicates are kept."""
    return [link.inference_host.host_url for source in sources for link in source.inference_hosts]


class SqlHostCatalog:
    """Host catalog stored in a relational database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _sources(self, *criteria) -> list[Source]:
        stmt = (
            select(Source)
            .where(*criteria)
            .options(selectinload(Source.inference_hosts).selectinload(InferenceHostOnSource.inference_host))
            .order_by(Source.name, Source.id)
        )
        async with self.session_factory() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def hosts_for_model(self, model_id: str) -> list[str]:
        return _host_urls(await self._sources(Source.model_id == model_id))

    async def hosts_for_source_set(self, model_id: str, set_name: str) -> list[str]:
        return _host_urls(
            await self._sources(Source.model_id == model_id, Source.set_name == set_name)
        )

    async def get_source(self, source_id: str) -> Optional[SourceRecord]:
        sources = await self._sources(Source.id == source_id)
        if not sources:
            return None
        source = sources[0]
        return SourceRecord(
            id=source.id,
            model_id=source.model_id,
            set_name=source.set_name,
            host_urls=_host_urls([source]),
        )

    async def source_set_exists(self, model_id: str, set_name: str) -> bool:
        stmt = (
            select(Source.id)
            .where(Source.model_id == model_id, Source.set_name == set_name)
            .limit(1)
        )
        async with self.session_factory() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none() is not None

    async def create_source(self, name: str, model_id: str, set_name: str) -> Source:
        async with self.session_factory() as db:
            source = Source(name=name, model_id=model_id, set_name=set_name)
            db.add(source)
            await db.commit()
            await db.refresh(source)
        logger.info(f"Created source {source.id} ({model_id}/{set_name})")
        return source

    async def create_host(self, host_url: str) -> InferenceHost:
        """Register a host. The URL is stored in ``scheme://host:port`` form."""
        async with self.session_factory() as db:
            host = InferenceHost(host_url=canonical_host_url(host_url))
            db.add(host)
            await db.commit()
            await db.refresh(host)
        logger.info(f"Registered inference host {host.host_url}")
        return host

    async def get_host_by_id(self, host_id: str) -> Optional[InferenceHost]:
        async with self.session_factory() as db:
            result = await db.execute(select(InferenceHost).where(InferenceHost.id == host_id))
            return result.scalar_one_or_none()

    async def attach_host_to_source(self, host_id: str, source_id: str) -> InferenceHostOnSource:
        async with self.session_factory() as db:
            link = InferenceHostOnSource(source_id=source_id, inference_host_id=host_id)
            db.add(link)
            await db.commit()
        logger.info(f"Attached inference host {host_id} to source {source_id}")
        return link


class CatalogAccessPolicy:
    """Grants access to a (model, source set) pair that exists in the catalog.

    Per-user rules belong to the application's own authorisation layer, which
    can be plugged in through ``AccessPolicy`` instead.
    """

    def __init__(self, catalog: HostCatalog):
        self.catalog = catalog

    async def can_access(
        self, model_id: str, set_name: str, user: Optional[Any] = None
    ) -> bool:
        return await self.catalog.source_set_exists(model_id, set_name)

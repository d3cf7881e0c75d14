"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pymongo import MongoClient

from dms.application.load_sync_state import LoadSyncStateHandler
from dms.application.sync_orders import SyncOrdersHandler
from dms.domain.events import EventPublisher
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.infrastructure.config import Settings, get_settings
from dms.infrastructure.events.redis_publisher import (
    LoggingEventPublisher,
    RedisEventPublisher,
)
from dms.infrastructure.persistence.json_external_order_source import (
    JsonExternalOrderSource,
)
from dms.infrastructure.persistence.json_pos_repository import JsonPosRepository
from dms.infrastructure.persistence.mongo_external_order_source import (
    MongoExternalOrderSource,
)
from dms.infrastructure.scheduler import SyncScheduler


def pos_repository(settings: Settings | None = None) -> JsonPosRepository:
    settings = settings or get_settings()
    return JsonPosRepository(settings.data_dir)


def external_order_source(settings: Settings | None = None) -> ExternalOrderSource:
    settings = settings or get_settings()
    if settings.source == "mongo":
        db = MongoClient(settings.mongo_url)[settings.mongo_db]
        return MongoExternalOrderSource(
            db[settings.orders_collection],
            db[settings.customers_collection],
        )
    return JsonExternalOrderSource(
        settings.data_dir / f"{settings.orders_collection}.json",
        settings.data_dir / f"{settings.customers_collection}.json",
    )


def event_publisher(settings: Settings | None = None) -> EventPublisher:
    settings = settings or get_settings()
    if settings.redis_url:
        return RedisEventPublisher(settings.redis_url, settings.events_channel)
    return LoggingEventPublisher()


def sync_scheduler(settings: Settings | None = None) -> SyncScheduler:
    settings = settings or get_settings()
    source = external_order_source(settings)
    return SyncScheduler(
        load_state=LoadSyncStateHandler(source),
        sync_orders=SyncOrdersHandler(
            pos_repo=pos_repository(settings),
            source=source,
            publisher=event_publisher(settings),
        ),
    )

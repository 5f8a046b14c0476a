from __future__ import annotations

from dataclasses import dataclass

import redis
from fastapi import Request
from sqlalchemy.engine import Engine

from orderbot.application.ports.cache import CacheStore
from orderbot.application.ports.publisher import EventPublisher
from orderbot.application.services.menu_resolution import FirstActiveMenuResolver, MenuResolver
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.config import Settings
from orderbot.infrastructure.cache.cache_store import NullCacheStore, RedisCacheStore
from orderbot.infrastructure.cache.redis_client import build_redis_client
from orderbot.infrastructure.db.repositories.catalog_repo import SqlAlchemyCatalogRepository
from orderbot.infrastructure.db.repositories.inventory_repo import SqlAlchemyInventoryRepository
from orderbot.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from orderbot.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from orderbot.infrastructure.db.repositories.promotion_repo import SqlAlchemyPromotionRepository
from orderbot.infrastructure.db.session import build_engine
from orderbot.infrastructure.messaging.redis_publisher import (
    LoggingEventPublisher,
    RedisEventPublisher,
)


@dataclass
class Container:
    """Process-scoped collaborators shared by every request."""

    settings: Settings
    engine: Engine
    redis_client: redis.Redis | None
    order_repository: SqlAlchemyOrderRepository
    menu_repository: SqlAlchemyMenuRepository
    catalog_repository: SqlAlchemyCatalogRepository
    inventory_repository: SqlAlchemyInventoryRepository
    promotion_repository: SqlAlchemyPromotionRepository
    menu_resolver: MenuResolver
    totals_calculator: OrderTotalsCalculator
    publisher: EventPublisher
    cache: CacheStore

    def close(self) -> None:
        self.engine.dispose()
        if self.redis_client is not None:
            self.redis_client.close()


def build_container(settings: Settings, engine: Engine | None = None) -> Container:
    engine = engine or build_engine(settings.require_database_url())
    redis_client = build_redis_client(settings.redis_url) if settings.redis_url else None

    menu_repository = SqlAlchemyMenuRepository(engine)
    catalog_repository = SqlAlchemyCatalogRepository(engine)
    promotion_repository = SqlAlchemyPromotionRepository(engine)
    return Container(
        settings=settings,
        engine=engine,
        redis_client=redis_client,
        order_repository=SqlAlchemyOrderRepository(engine),
        menu_repository=menu_repository,
        catalog_repository=catalog_repository,
        inventory_repository=SqlAlchemyInventoryRepository(engine),
        promotion_repository=promotion_repository,
        menu_resolver=FirstActiveMenuResolver(menu_repository),
        totals_calculator=OrderTotalsCalculator(
            promotion_repository=promotion_repository,
            catalog_repository=catalog_repository,
        ),
        publisher=RedisEventPublisher(redis_client) if redis_client else LoggingEventPublisher(),
        cache=RedisCacheStore(redis_client) if redis_client else NullCacheStore(),
    )


def get_container(request: Request) -> Container:
    return request.app.state.container

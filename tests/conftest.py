"""Shared fixtures: a sqlite database per test, a temporary upload directory
and an HTTP client bound to an app wired with those resources."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel

from app.core.config import settings
from app.core.database import build_engine, build_session_maker
from app.main import create_app
from app.models import Category
from app.services.image_storage import ImageStorage
from app.services.product_service import ProductService

PRODUCTS_URL = f"{settings.api_prefix}/products"


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    factory = build_session_maker(engine)
    async with factory() as db:
        db.add(Category(id=1, name="Laptops"))
        db.add(Category(id=2, name="Phones"))
        await db.commit()
    return factory


@pytest.fixture
def product_service(session_factory: async_sessionmaker) -> ProductService:
    return ProductService(session_factory)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def image_storage(upload_dir: Path) -> ImageStorage:
    return ImageStorage(upload_dir)


@pytest_asyncio.fixture
async def client(product_service: ProductService, image_storage: ImageStorage) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(product_service=product_service, image_storage=image_storage)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def product_payload() -> dict:
    return {
        "name": "ThinkPad X1 Carbon",
        "price": 1499.0,
        "thumbnail": "",
        "description": "14 inch business ultrabook",
        "category_id": 1,
    }


@pytest.fixture
def distinct_statuses(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "distinct_error_statuses", True)

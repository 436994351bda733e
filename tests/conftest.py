import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.db import async_session_maker, engine, init_db
from app.main import app
from app.models import (
    Boat,
    Port,
    ServiceCategory,
    ServiceRequest,
    User,
    UserPort,
    UserServiceCategory,
)


@pytest.fixture
async def session():
    """Fresh in-memory database per test; disposing the pool drops it."""
    await init_db()
    async with async_session_maker() as s:
        yield s
    await engine.dispose()


@pytest.fixture
async def client(session):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


class Directory:
    """Small builder for directory fixtures."""

    def __init__(self, session):
        self.session = session
        self._seq = 0

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def user(self, profile: str = "pleasure_boater", user_id: int | None = None, **kwargs) -> User:
        self._seq += 1
        return await self._save(
            User(id=user_id, email=f"user{self._seq}@example.com", profile=profile, **kwargs)
        )

    async def provider(
        self, ports=(), capabilities=(), user_id: int | None = None, profile: str = "boat_manager", **kwargs
    ) -> User:
        user = await self.user(profile=profile, user_id=user_id, **kwargs)
        for port in ports:
            self.session.add(UserPort(user_id=user.id, port_id=port.id))
        for category in capabilities:
            self.session.add(UserServiceCategory(user_id=user.id, service_category_id=category.id))
        await self.session.commit()
        return user

    async def port(self, name: str = "Port Camargue") -> Port:
        return await self._save(Port(name=name))

    async def category(self, name: str) -> ServiceCategory:
        return await self._save(ServiceCategory(name=name))

    async def boat(self, owner: User, port: Port | None) -> Boat:
        return await self._save(Boat(owner_id=owner.id, name="Aquila", port_id=port.id if port else None))

    async def past_request(
        self,
        client: User,
        boat: Boat,
        category: ServiceCategory,
        provider: User,
        created_at: datetime,
    ) -> ServiceRequest:
        return await self._save(
            ServiceRequest(
                client_id=client.id,
                boat_id=boat.id,
                service_category_id=category.id,
                description="Previous job",
                assigned_provider_id=provider.id,
                created_at=created_at,
            )
        )


@pytest.fixture
def directory(session) -> Directory:
    return Directory(session)

"""Tests for the cross-set player search endpoint."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from setkeeper.db.database import get_session
from setkeeper.main import app
from setkeeper.models.db import Base


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _set_with_cards(client: AsyncClient, text: str, **fields) -> str:
    payload = {"name": "Set", "year": 2023, "brand": "Topps", "product_line": "Base", **fields}
    created = await client.post("/sets", json=payload)
    assert created.status_code == 201
    set_id = created.json()["id"]
    imported = await client.post(f"/sets/{set_id}/import", json={"text": text})
    assert imported.status_code == 200, imported.text
    return set_id


@pytest.fixture
async def catalog(client: AsyncClient) -> dict[str, str]:
    """Three sets that each hold a Mike Trout card."""
    return {
        "topps_22": await _set_with_cards(
            client,
            "27 Mike Trout - Angels\n1 Aaron Judge - Yankees",
            name="2022 Topps",
            year=2022,
            product_line="Series 1",
        ),
        "topps_23": await _set_with_cards(
            client, "10 Mike Trout - Angels", name="2023 Topps", product_line="Series 2"
        ),
        "bowman_23": await _set_with_cards(
            client,
            "BCP-5 Mike Trout - Angels",
            name="2023 Bowman",
            brand="Bowman",
            product_line="Chrome",
        ),
    }


class TestPlayerSearch:
    async def test_sorted_by_year_then_product_line(
        self, client: AsyncClient, catalog: dict[str, str]
    ) -> None:
        """Newest set year first, then product line."""
        response = await client.get("/cards/search", params={"player": "trout"})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [r["card_set"]["id"] for r in data["results"]] == [
            catalog["bowman_23"],
            catalog["topps_23"],
            catalog["topps_22"],
        ]
        assert data["results"][0]["card"]["card_number"] == "BCP-5"

    async def test_filters_narrow_sets(self, client: AsyncClient, catalog: dict[str, str]) -> None:
        """Year and brand filters apply to the set, not the card."""
        response = await client.get(
            "/cards/search", params={"player": "Trout", "year": 2023, "brand": "Topps"}
        )

        results = response.json()["results"]
        assert [r["card_set"]["id"] for r in results] == [catalog["topps_23"]]

    async def test_set_type_filter(self, client: AsyncClient, catalog: dict[str, str]) -> None:
        response = await client.get(
            "/cards/search", params={"player": "Trout", "set_type": "rainbow"}
        )

        assert response.json()["count"] == 0

    async def test_accented_term(self, client: AsyncClient) -> None:
        """An accented search finds the stored folded name."""
        await _set_with_cards(client, "599 José Ramírez - Cleveland Guardians")

        response = await client.get("/cards/search", params={"player": "Ramírez"})

        data = response.json()
        assert data["player"] == "Ramirez"
        assert [r["card"]["player_name"] for r in data["results"]] == ["Jose Ramirez"]

    async def test_blank_player_rejected(self, client: AsyncClient) -> None:
        """A player name is required."""
        response = await client.get("/cards/search", params={"player": "  "})

        assert response.status_code == 400
        assert response.json()["detail"]["kind"] == "missing_required"

"""Tests for service endpoints and datastore error mapping."""

import logging

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DataError, IntegrityError, OperationalError, ProgrammingError

from world_city_api import crud
from world_city_api.main import configure_logging


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "World City API"}


@pytest.mark.asyncio
async def test_health_endpoint(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def _raiser(exc):
    async def _raise(*args, **kwargs):
        raise exc
    return _raise


class TestDatastoreErrors:
    """Datastore failures surface as explicit JSON errors instead of hanging requests."""

    @pytest.mark.asyncio
    async def test_operational_error_returns_503(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            crud, "get_cities_by_name",
            _raiser(OperationalError("SELECT", {}, Exception("connection lost"))),
        )
        response = await client.get("/city/Amsterdam")
        assert response.status_code == 503
        assert response.json()["error"] == "OperationalError"

    @pytest.mark.asyncio
    async def test_integrity_error_returns_409(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            crud, "create_city",
            _raiser(IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: city.id"))),
        )
        response = await client.post(
            "/city",
            json={"name": "Testville", "countrycode": "TST", "district": "Test", "population": 1},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "IntegrityError"

    @pytest.mark.asyncio
    async def test_data_error_returns_400(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            crud, "update_city_population",
            _raiser(DataError("UPDATE", {}, Exception("value out of range"))),
        )
        response = await client.put("/city/Amsterdam", json={"population": 1})
        assert response.status_code == 400
        assert response.json()["error"] == "DataError"

    @pytest.mark.asyncio
    async def test_other_database_error_returns_500(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            crud, "delete_cities_by_name",
            _raiser(ProgrammingError("DELETE", {}, Exception("no such table: city"))),
        )
        response = await client.delete("/city/Amsterdam")
        assert response.status_code == 500
        assert response.json()["error"] == "ProgrammingError"


def test_configure_logging_applies_log_level(monkeypatch):
    root = logging.getLogger()
    previous = root.level
    monkeypatch.setenv("LOG_LEVEL", "debug")
    try:
        configure_logging()
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)

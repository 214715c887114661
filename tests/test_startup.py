"""Tests for the readings load that runs when the app starts."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.config import settings
from app.exceptions import LoadError, ParseError
from app.main import _load_readings_on_startup
from app.services.loader import LoadSummary


@pytest.mark.asyncio
async def test_startup_load_runs_loader():
    session_factory = MagicMock()
    with (
        patch("app.main.AsyncSessionLocal", session_factory),
        patch(
            "app.main.load_energy_readings",
            AsyncMock(return_value=LoadSummary(parsed=24, inserted=24)),
        ) as mock_load,
    ):
        await _load_readings_on_startup()

    mock_load.assert_awaited_once()
    session_factory.assert_called_once_with()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ParseError("CSV is not valid UTF-8"), LoadError("database unreachable")],
)
async def test_startup_load_failure_is_logged_not_raised(error, caplog):
    with (
        patch("app.main.AsyncSessionLocal", MagicMock()),
        patch("app.main.load_energy_readings", AsyncMock(side_effect=error)),
        caplog.at_level(logging.ERROR, logger="app.main"),
    ):
        await _load_readings_on_startup()

    assert "Energy readings load failed" in caplog.text
    assert str(error) in caplog.text


@pytest.mark.asyncio
async def test_startup_load_survives_bad_rows_in_source(tmp_path, monkeypatch):
    source = tmp_path / "readings.csv"
    source.write_bytes(
        b"Time (UTC),Quantity kWh\n"
        b"2025-01-01 00:00,1.5\n"
        b"2025-01-01 01:00,inf\n"
        b"2025-01-01 02:00,1000000000\n"
    )
    monkeypatch.setattr(settings, "energy_readings_file_path", str(source))

    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock(rowcount=1))
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session

    with patch("app.main.AsyncSessionLocal", factory):
        await _load_readings_on_startup()

    session.execute.assert_awaited_once()
    session.commit.assert_awaited_once()

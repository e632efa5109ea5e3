"""Unit tests for the database session factory bootstrap."""

import os
from unittest.mock import patch

import pytest

from src.bootstrap.database import (
    get_database_url,
    get_session_factory,
    mask_database_url,
    normalize_database_url,
    reset_database_bootstrap,
)


@pytest.fixture(autouse=True)
def reset_bootstrap():
    reset_database_bootstrap()
    yield
    reset_database_bootstrap()


class TestNormalizeDatabaseUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql+asyncpg://u:p@db/gov", "postgresql+asyncpg://u:p@db/gov"),
            ("postgresql://u:p@db/gov", "postgresql+asyncpg://u:p@db/gov"),
            ("postgres://u:p@db/gov", "postgresql+asyncpg://u:p@db/gov"),
            ("u:p@db/gov", "postgresql+asyncpg://u:p@db/gov"),
        ],
    )
    def test_driver_prefix(self, url: str, expected: str) -> None:
        assert normalize_database_url(url) == expected


class TestMaskDatabaseUrl:
    def test_password_hidden(self) -> None:
        masked = mask_database_url("postgresql+asyncpg://gov:secret@db:5432/gov")

        assert masked == "postgresql+asyncpg://gov:***@db:5432/gov"
        assert "secret" not in masked

    def test_url_without_password_unchanged(self) -> None:
        url = "postgresql+asyncpg://gov@db/gov"
        assert mask_database_url(url) == url


class TestGetDatabaseUrl:
    def test_missing_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="DATABASE_URL"):
                get_database_url()

    def test_reads_and_normalizes(self) -> None:
        with patch.dict(os.environ, {"DATABASE_URL": "postgres://u:p@db/gov"}):
            assert get_database_url() == "postgresql+asyncpg://u:p@db/gov"


class TestGetSessionFactory:
    def test_singleton_until_reset(self) -> None:
        """Creating the engine does not connect, so no database is needed."""
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://u:p@db/gov"}):
            factory = get_session_factory()
            assert get_session_factory() is factory

            reset_database_bootstrap()
            assert get_session_factory() is not factory

    def test_missing_url_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                get_session_factory()

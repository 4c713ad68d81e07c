"""Tests for application settings."""

import pytest

from shoppinglist.config import Settings


class TestSyncDatabaseUrl:
    """Tests for the URL handed to the synchronous engine."""

    @pytest.mark.parametrize(
        "database_url,expected",
        [
            ("postgresql+asyncpg://app@db/meals", "postgresql+psycopg2://app@db/meals"),
            ("postgresql://app@db/meals", "postgresql+psycopg2://app@db/meals"),
            ("sqlite:///meals.db", "sqlite:///meals.db"),
        ],
    )
    def test_names_the_psycopg2_driver(self, database_url, expected):
        """Test that PostgreSQL URLs always select psycopg2."""
        assert Settings(database_url=database_url).sync_database_url == expected

    def test_origins_split(self):
        """Test that blank origins are dropped."""
        settings = Settings(allowed_origins="http://a.test, ,http://b.test")
        assert settings.origins == ["http://a.test", "http://b.test"]

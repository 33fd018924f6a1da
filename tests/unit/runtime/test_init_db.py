"""Tests for database bootstrap and sample data."""

from src.users_api.core.services import StorageGateway
from src.users_api.runtime.init_db import (
    SAMPLE_USERS,
    init_db,
    reset_db,
    seed_sample_data,
)


class TestInitDb:
    def test_init_creates_usable_schema(self, test_config):
        gateway = StorageGateway(test_config.database)
        try:
            init_db(gateway)
            assert gateway.health_check()
        finally:
            gateway.close()

    def test_seed_inserts_sample_users(self, gateway, repository):
        inserted = seed_sample_data(gateway)

        assert inserted == len(SAMPLE_USERS) == 8
        stats = repository.get_stats()
        assert stats.total_users == 8
        assert set(stats.users_by_country) == {
            "United States",
            "United Kingdom",
            "France",
            "Spain",
            "Germany",
            "Japan",
            "Egypt",
            "Canada",
        }

    def test_seed_skips_populated_table(self, gateway, repository, make_user_fields):
        repository.create(make_user_fields())

        assert seed_sample_data(gateway) == 0
        assert repository.get_stats().total_users == 1

    def test_reset_replaces_existing_rows(self, gateway, repository, make_user_fields):
        extra = repository.create(make_user_fields())

        inserted = reset_db(gateway)

        assert inserted == 8
        assert repository.get_stats().total_users == 8
        assert repository.search(extra.email).users == []

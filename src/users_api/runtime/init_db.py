"""Database initialization: schema creation and sample data."""

from loguru import logger

from src.users_api.core.services import StorageGateway
from src.users_api.entities.user import UserRepository
from src.users_api.runtime.context import get_config

SAMPLE_USERS: tuple[dict[str, str], ...] = (
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@example.com",
        "phone": "+1-555-0123",
        "country": "United States",
    },
    {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane.smith@example.com",
        "phone": "+44-20-7946-0958",
        "country": "United Kingdom",
    },
    {
        "first_name": "Pierre",
        "last_name": "Dubois",
        "email": "pierre.dubois@example.com",
        "phone": "+33-1-42-86-83-26",
        "country": "France",
    },
    {
        "first_name": "Maria",
        "last_name": "Garcia",
        "email": "maria.garcia@example.com",
        "phone": "+34-91-123-4567",
        "country": "Spain",
    },
    {
        "first_name": "Hans",
        "last_name": "Mueller",
        "email": "hans.mueller@example.com",
        "phone": "+49-30-12345678",
        "country": "Germany",
    },
    {
        "first_name": "Yuki",
        "last_name": "Tanaka",
        "email": "yuki.tanaka@example.com",
        "phone": "+81-3-1234-5678",
        "country": "Japan",
    },
    {
        "first_name": "Ahmed",
        "last_name": "Hassan",
        "email": "ahmed.hassan@example.com",
        "phone": "+20-2-1234-5678",
        "country": "Egypt",
    },
    {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@example.com",
        "phone": "+1-416-555-0199",
        "country": "Canada",
    },
)


def init_db(gateway: StorageGateway) -> None:
    """Create the database tables and indexes."""
    gateway.ensure_ready()
    logger.info("Database initialized with tables.")


def seed_sample_data(gateway: StorageGateway) -> int:
    """Insert the sample users into an empty table.

    Returns:
        Number of users inserted; 0 when the table already had rows.
    """
    repository = UserRepository(gateway)
    existing = repository.find_all(page=1, limit=1).pagination.total_count
    if existing:
        logger.info("Skipping sample data: {} users already present", existing)
        return 0

    for fields in SAMPLE_USERS:
        repository.create(fields)
    logger.info("Seeded {} sample users", len(SAMPLE_USERS))
    return len(SAMPLE_USERS)


def reset_db(gateway: StorageGateway) -> int:
    """Drop every user, recreate the schema and reseed it."""
    gateway.ensure_ready()
    gateway.drop_schema()
    gateway.create_schema()
    logger.warning("Database reset")
    return seed_sample_data(gateway)


if __name__ == "__main__":
    main_gateway = StorageGateway(get_config().database)
    try:
        init_db(main_gateway)
        seed_sample_data(main_gateway)
    finally:
        main_gateway.close()

import logging
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    String,
    Table,
    inspect,
)
from sqlalchemy.orm import registry
from accounts.domain import model

logger = logging.getLogger(__name__)

# SQLAlchemy 2.0 pattern: use registry
mapper_registry = registry()
metadata = mapper_registry.metadata

users = Table(
    "users",
    metadata,
    Column("user_id", String(36), primary_key=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("document_id", BigInteger, nullable=False),
    Column("email", String(255), nullable=False),
    # final guard against two concurrent creations picking the same name
    Column("username", String(150), unique=True, nullable=False),
    Column("password", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="patient"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("contact_number", String(30)),
)


def start_mappers():
    # The orders context maps users too; mapping twice is an error
    if inspect(model.User, raiseerr=False) is not None:
        return
    logger.info("Starting account mappers")
    mapper_registry.map_imperatively(model.User, users)

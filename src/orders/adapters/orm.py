import logging
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    event,
    inspect,
)
from sqlalchemy.orm import registry
from orders.domain import model

logger = logging.getLogger(__name__)

# SQLAlchemy 2.0 pattern: use registry
mapper_registry = registry()
metadata = mapper_registry.metadata

exams = Table(
    "exams",
    metadata,
    Column("exam_id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("short_name", String(50), nullable=False),
    Column("scheduled_days", Integer, nullable=False, server_default="0"),
)

orders = Table(
    "orders",
    metadata,
    Column("order_id", String(36), primary_key=True),
    Column("patient_id", String(36), nullable=False, index=True),
    Column("doctor_id", String(36), nullable=False),
    Column("exam_type_id", String(36), ForeignKey("exams.exam_id"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("is_complete", Boolean, nullable=False, server_default="0"),
    Column("result_id", String(36)),
)

results = Table(
    "results",
    metadata,
    Column("result_id", String(36), primary_key=True),
    Column("order_id", String(36), ForeignKey("orders.order_id"), unique=True, nullable=False),
    Column("bacteriologist_id", String(36), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("payload", JSON),
)

# Read model table - not mapped to domain entity
messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("patient_id", String(36), nullable=False, index=True),
    Column("order_id", String(36)),
    Column("message_text", Text, nullable=False),
    Column("created_at", DateTime(timezone=True)),
)


def start_mappers():
    if inspect(model.Order, raiseerr=False) is not None:
        return
    logger.info("Starting order mappers")
    mapper_registry.map_imperatively(model.Exam, exams)
    mapper_registry.map_imperatively(model.Order, orders)
    mapper_registry.map_imperatively(model.Result, results)
    event.listen(model.Order, "load", receive_load)


def receive_load(order, _):
    order.events = []

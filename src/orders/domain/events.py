"""Domain events for the orders service."""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.commands import Event


@dataclass
class OrderCreated(Event):
    """Event raised when a doctor has requested a lab test."""
    order_id: str
    patient_id: str
    exam_type_id: str
    created_at: datetime


@dataclass
class ResultAttached(Event):
    """Event raised when a bacteriologist has attached the result of an order."""
    order_id: str
    patient_id: str
    exam_type_id: str
    result_id: str

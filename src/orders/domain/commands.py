"""Commands for the orders service."""

from dataclasses import dataclass, field
from typing import Any, Dict

from shared.domain.commands import Command


@dataclass
class CreateOrder(Command):
    """Command to record a lab test requested by a doctor."""
    patient_id: str
    doctor_id: str
    exam_type_id: str


@dataclass
class AttachResult(Command):
    """Command to attach a result to an order and mark it complete."""
    order_id: str
    bacteriologist_id: str
    payload: Dict[str, Any] = field(default_factory=dict)

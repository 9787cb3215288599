from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from orders.domain.events import OrderCreated, ResultAttached
from shared.domain.exceptions import BadRequest


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps (as some databases return them) as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(unsafe_hash=True)
class Exam:
    exam_id: str
    name: str
    short_name: str
    scheduled_days: int       # turnaround between order and appointment


@dataclass
class Result:
    result_id: str
    order_id: str
    bacteriologist_id: str
    created_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(unsafe_hash=True)
class Order:
    order_id: str
    patient_id: str
    doctor_id: str
    exam_type_id: str
    created_at: datetime
    is_complete: bool = False
    result_id: Optional[str] = None
    events: List = field(default_factory=list, compare=False, hash=False)

    def appointment_date(self, exam: Exam) -> datetime:
        return as_utc(self.created_at) + timedelta(days=exam.scheduled_days)

    def create(self) -> None:
        """Mark order as requested and generate the OrderCreated event."""
        self.events.append(
            OrderCreated(
                order_id=self.order_id,
                patient_id=self.patient_id,
                exam_type_id=self.exam_type_id,
                created_at=self.created_at,
            )
        )

    def attach_result(self, result_id: str) -> None:
        """
        Complete the order with its result.

        An order is completed exactly once; result_id is set iff is_complete.
        """
        if self.is_complete:
            raise BadRequest(f"Order {self.order_id} already has a result")

        self.result_id = result_id
        self.is_complete = True
        self.events.append(
            ResultAttached(
                order_id=self.order_id,
                patient_id=self.patient_id,
                exam_type_id=self.exam_type_id,
                result_id=result_id,
            )
        )

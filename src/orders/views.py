"""
Views for read operations - separate from command/write path.

Orders are enriched into client-facing views by joining, per order, the exam
definition, the participating users and, once the order is complete, its
result and the bacteriologist who produced it. A pending order's view does
not carry the result fields at all; the variant is chosen by the order's
completion flag.
"""
import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select

from accounts.domain.model import User
from orders.adapters import orm
from orders.domain.model import Exam, Order, Result, as_utc
from orders.service_layer import handlers
from orders.service_layer.unit_of_work import OrdersUnitOfWork
from shared.domain.exceptions import BadRequest, NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaffSummary:
    document_id: int
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "StaffSummary":
        return cls(document_id=user.document_id, first_name=user.first_name, last_name=user.last_name)


@dataclass(frozen=True)
class PatientSummary:
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "PatientSummary":
        return cls(first_name=user.first_name, last_name=user.last_name)


@dataclass(frozen=True)
class PendingOrderView:
    order_id: str
    name: str
    short_name: str
    is_complete: bool
    appointment_date: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompletedOrderView(PendingOrderView):
    bacteriologist: StaffSummary
    result_date: str
    result_id: str


@dataclass(frozen=True)
class PendingOrderDetail(PendingOrderView):
    doctor: StaffSummary
    patient: PatientSummary


@dataclass(frozen=True)
class CompletedOrderDetail(CompletedOrderView):
    doctor: StaffSummary
    patient: PatientSummary


OrderView = Union[PendingOrderView, CompletedOrderView]
OrderDetail = Union[PendingOrderDetail, CompletedOrderDetail]


def _iso(moment: datetime) -> str:
    return as_utc(moment).isoformat()


def build_order_view(
    order: Order,
    exam: Exam,
    result: Optional[Result] = None,
    bacteriologist: Optional[User] = None,
) -> OrderView:
    """Merge an order with its exam and, when complete, its result into the list shape."""
    base = dict(
        order_id=order.order_id,
        name=exam.name,
        short_name=exam.short_name,
        is_complete=order.is_complete,
        appointment_date=_iso(order.appointment_date(exam)),
        created_at=_iso(order.created_at),
    )
    if not order.is_complete:
        return PendingOrderView(**base)
    return CompletedOrderView(
        **base,
        bacteriologist=StaffSummary.from_user(bacteriologist),
        result_date=_iso(result.created_at),
        result_id=order.result_id,
    )


def build_order_detail(
    order: Order,
    exam: Exam,
    doctor: User,
    patient: User,
    result: Optional[Result] = None,
    bacteriologist: Optional[User] = None,
) -> OrderDetail:
    """Like build_order_view, plus doctor and patient summaries."""
    view = build_order_view(order, exam, result, bacteriologist)
    participants = dict(doctor=StaffSummary.from_user(doctor), patient=PatientSummary.from_user(patient))
    values = {f.name: getattr(view, f.name) for f in fields(view)}
    if isinstance(view, CompletedOrderView):
        return CompletedOrderDetail(**values, **participants)
    return PendingOrderDetail(**values, **participants)


def _require(record, message: str):
    if record is None:
        raise NotFound(message)
    return record


def _fetch_exam(order: Order, uow: OrdersUnitOfWork) -> Exam:
    return _require(uow.exams.get(order.exam_type_id), f"Exam type {order.exam_type_id} not found")


def _fetch_user(user_id: str, uow: OrdersUnitOfWork) -> User:
    return _require(uow.users.get(user_id), f"User {user_id} not found")


def _fetch_outcome(order: Order, uow: OrdersUnitOfWork):
    """Result and bacteriologist of a completed order, (None, None) otherwise."""
    if not order.is_complete:
        return None, None
    result = _require(uow.results.get(order.result_id), f"Result {order.result_id} not found")
    return result, _fetch_user(result.bacteriologist_id, uow)


def enrich_order(order: Order, uow: OrdersUnitOfWork) -> OrderView:
    exam = _fetch_exam(order, uow)
    result, bacteriologist = _fetch_outcome(order, uow)
    return build_order_view(order, exam, result, bacteriologist)


def order_detail(order_id: str, uow: OrdersUnitOfWork) -> Dict[str, Any]:
    """
    Full view of one order including its participants.

    Raises:
        NotFound: If the order or any record it references is missing
    """
    with uow:
        order = handlers.get_order(order_id, uow)
        exam = _fetch_exam(order, uow)
        doctor = _fetch_user(order.doctor_id, uow)
        patient = _fetch_user(order.patient_id, uow)
        result, bacteriologist = _fetch_outcome(order, uow)

        detail = build_order_detail(order, exam, doctor, patient, result, bacteriologist)

    return detail.to_dict()


def patient_orders(
    uow: OrdersUnitOfWork,
    patient: Optional[str] = None,
    username: Optional[str] = None,
    is_complete: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    """
    List view of a patient's orders, in the order the store returns them.

    The patient is given either by id or by username/e-mail.

    Raises:
        BadRequest: If neither patient nor username is given
        NotFound: If the patient or their orders cannot be found
    """
    if not patient and not username:
        raise BadRequest("patient or username query is required")

    with uow:
        if username:
            found = uow.users.get_by_login(username)
            if found is None:
                raise NotFound("Patient not found")
            patient = found.user_id

        orders = handlers.get_orders(uow, patient=patient, is_complete=is_complete)
        views = [enrich_order(order, uow).to_dict() for order in orders]

    logger.info(f"Enriched {len(views)} orders for patient {patient}")
    return views


def patient_messages(patient_id: str, uow: OrdersUnitOfWork) -> List[Dict[str, Any]]:
    """Messages left for a patient, newest first."""
    messages = orm.messages
    with uow:
        rows = uow.session.execute(
            select(messages.c.order_id, messages.c.message_text, messages.c.created_at)
            .where(messages.c.patient_id == patient_id)
            .order_by(messages.c.id.desc())
        ).fetchall()

    return [
        {
            "order_id": row.order_id,
            "message_text": row.message_text,
            "created_at": _iso(row.created_at) if row.created_at else None,
        }
        for row in rows
    ]

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from orders.adapters import orm
from orders.domain import model
from orders.domain.commands import AttachResult, CreateOrder
from orders.domain.events import OrderCreated, ResultAttached
from orders.domain.schemas import OrderSchema, ResultSchema
from orders.service_layer.unit_of_work import OrdersUnitOfWork
from shared.domain.exceptions import NotFound
from shared.services.validation import validate

logger = logging.getLogger(__name__)


def _require_user(uow: OrdersUnitOfWork, user_id: str, role_label: str):
    if uow.users.get(user_id) is None:
        raise NotFound(f"{role_label} {user_id} not found")


def create_order(command: CreateOrder, uow: OrdersUnitOfWork) -> str:
    """
    Record a lab test requested by a doctor.

    Returns:
        order_id: The ID of the created order

    Raises:
        ValidationError: If the command payload is malformed
        NotFound: If the exam type, patient or doctor does not exist
    """
    data = validate(
        dict(patient_id=command.patient_id, doctor_id=command.doctor_id, exam_type_id=command.exam_type_id),
        OrderSchema,
    )

    with uow:
        if uow.exams.get(data.exam_type_id) is None:
            raise NotFound(f"Exam type {data.exam_type_id} not found")
        _require_user(uow, data.patient_id, "Patient")
        _require_user(uow, data.doctor_id, "Doctor")

        order = model.Order(
            order_id=str(uuid.uuid4()),
            patient_id=data.patient_id,
            doctor_id=data.doctor_id,
            exam_type_id=data.exam_type_id,
            created_at=datetime.now(timezone.utc),
        )
        order.create()

        order_id = uow.orders.add(order)
        uow.commit()

    logger.info(f"Created order {order_id} for patient {data.patient_id}")
    return order_id


def attach_result(command: AttachResult, uow: OrdersUnitOfWork) -> str:
    """
    Store the result of an order and mark the order complete.

    Raises:
        ValidationError: If the command payload is malformed
        NotFound: If the order or the bacteriologist does not exist
        BadRequest: If the order already has a result
    """
    data = validate(
        dict(order_id=command.order_id, bacteriologist_id=command.bacteriologist_id, payload=command.payload),
        ResultSchema,
    )

    with uow:
        order = uow.orders.get(data.order_id)
        if order is None:
            raise NotFound(f"Order {data.order_id} not found")
        _require_user(uow, data.bacteriologist_id, "Bacteriologist")

        result = model.Result(
            result_id=str(uuid.uuid4()),
            order_id=order.order_id,
            bacteriologist_id=data.bacteriologist_id,
            created_at=datetime.now(timezone.utc),
            payload=data.payload,
        )
        order.attach_result(result.result_id)

        result_id = uow.results.add(result)
        uow.commit()

    logger.info(f"Attached result {result_id} to order {data.order_id}")
    return result_id


def get_order(order_id: str, uow: OrdersUnitOfWork) -> model.Order:
    """
    Must be called inside an open unit of work.

    Raises:
        NotFound: If the order does not exist
    """
    order = uow.orders.get(order_id)
    if order is None:
        raise NotFound("Test details could not be found")
    return order


def get_orders(
    uow: OrdersUnitOfWork,
    patient: Optional[str] = None,
    is_complete: Optional[bool] = None,
) -> List[model.Order]:
    """
    Orders of a patient, or all orders when no patient is given.

    Must be called inside an open unit of work.

    Raises:
        NotFound: If no order matches
    """
    orders = uow.orders.list(patient_id=patient, is_complete=is_complete)
    if not orders:
        raise NotFound("There isn't test for this patient")
    return orders


def _record_patient_message(uow: OrdersUnitOfWork, patient_id: str, order_id: str, message_text: str):
    uow.session.execute(
        orm.messages.insert().values(
            patient_id=patient_id,
            order_id=order_id,
            message_text=message_text,
            created_at=datetime.now(timezone.utc),
        ),
    )


def notify_patient_order_scheduled(event: OrderCreated, uow: OrdersUnitOfWork):
    """Leave a message for the patient that the test has been scheduled."""
    with uow:
        exam = uow.exams.get(event.exam_type_id)
        _record_patient_message(
            uow,
            event.patient_id,
            event.order_id,
            f"{exam.name} test has been scheduled. Already available for more details",
        )
        uow.commit()

    logger.info(f"Patient {event.patient_id} notified about order {event.order_id}")


def notify_patient_result_available(event: ResultAttached, uow: OrdersUnitOfWork):
    """Leave a message for the patient that the result is ready."""
    with uow:
        exam = uow.exams.get(event.exam_type_id)
        _record_patient_message(
            uow,
            event.patient_id,
            event.order_id,
            f"{exam.name} test results are available",
        )
        uow.commit()

    logger.info(f"Patient {event.patient_id} notified about result {event.result_id}")

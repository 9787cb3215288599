"""
Integration tests for orders - commands through the message bus, reads through views.

Tests verify that:
1. Commands create orders and attach results
2. Event handlers leave messages for the patient
3. Views enrich orders from exams, users and results
"""
from datetime import datetime, timezone

import pytest

from orders import views
from orders.domain.commands import AttachResult, CreateOrder
from orders.service_layer import handlers, messagebus
from orders.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from shared.domain.exceptions import BadRequest, NotFound, ValidationError

RESULT_FIELDS = {"bacteriologist", "result_date", "result_id"}


@pytest.fixture
def uow(seeded_session_factory):
    return SqlAlchemyUnitOfWork(session_factory=seeded_session_factory)


def place_order(uow):
    [order_id] = messagebus.handle(
        CreateOrder(patient_id="patient-1", doctor_id="doctor-1", exam_type_id="exam-cbc"), uow
    )
    return order_id


def test_create_order_persists_pending_order(uow):
    order_id = place_order(uow)

    with uow:
        order = handlers.get_order(order_id, uow)
        assert order.is_complete is False
        assert order.result_id is None
        assert order.patient_id == "patient-1"


def test_create_order_leaves_scheduled_message_for_patient(uow):
    order_id = place_order(uow)

    [message] = views.patient_messages("patient-1", uow)
    assert message["order_id"] == order_id
    assert message["message_text"] == (
        "Complete Blood Count test has been scheduled. Already available for more details"
    )


def test_create_order_for_unknown_exam(uow):
    with pytest.raises(NotFound):
        messagebus.handle(CreateOrder(patient_id="patient-1", doctor_id="doctor-1", exam_type_id="nope"), uow)


def test_create_order_validates_payload(uow):
    with pytest.raises(ValidationError):
        messagebus.handle(CreateOrder(patient_id="", doctor_id="doctor-1", exam_type_id="exam-cbc"), uow)


def test_attach_result_completes_order(uow):
    order_id = place_order(uow)

    [result_id] = messagebus.handle(
        AttachResult(order_id=order_id, bacteriologist_id="bact-1", payload={"hemoglobin": 13.5}), uow
    )

    with uow:
        order = handlers.get_order(order_id, uow)
        assert order.is_complete is True
        assert order.result_id == result_id
        assert uow.results.get(result_id).payload == {"hemoglobin": 13.5}

    texts = [m["message_text"] for m in views.patient_messages("patient-1", uow)]
    assert texts[0] == "Complete Blood Count test results are available"


def test_attach_result_twice_is_rejected(uow):
    order_id = place_order(uow)
    messagebus.handle(AttachResult(order_id=order_id, bacteriologist_id="bact-1"), uow)

    with pytest.raises(BadRequest):
        messagebus.handle(AttachResult(order_id=order_id, bacteriologist_id="bact-1"), uow)


def test_attach_result_to_unknown_order(uow):
    with pytest.raises(NotFound):
        messagebus.handle(AttachResult(order_id="missing", bacteriologist_id="bact-1"), uow)


def test_get_orders_raises_not_found_when_patient_has_none(uow):
    with uow:
        with pytest.raises(NotFound):
            handlers.get_orders(uow, patient="patient-1")


def test_get_orders_filters_by_completion(uow):
    first = place_order(uow)
    second = place_order(uow)
    messagebus.handle(AttachResult(order_id=second, bacteriologist_id="bact-1"), uow)

    with uow:
        pending = [o.order_id for o in handlers.get_orders(uow, patient="patient-1", is_complete=False)]
        everything = [o.order_id for o in handlers.get_orders(uow)]

    assert pending == [first]
    assert sorted(everything) == sorted([first, second])


def test_order_detail_of_pending_order(uow):
    order_id = place_order(uow)

    detail = views.order_detail(order_id, uow)

    assert detail["name"] == "Complete Blood Count"
    assert detail["doctor"] == {"document_id": 42, "first_name": "Gregory", "last_name": "House"}
    assert detail["patient"] == {"first_name": "Ana", "last_name": "Lopez"}
    assert RESULT_FIELDS.isdisjoint(detail)

    created = datetime.fromisoformat(detail["created_at"])
    appointment = datetime.fromisoformat(detail["appointment_date"])
    assert (appointment - created).days == 3
    assert created.tzinfo == timezone.utc


def test_order_detail_of_completed_order(uow):
    order_id = place_order(uow)
    [result_id] = messagebus.handle(AttachResult(order_id=order_id, bacteriologist_id="bact-1"), uow)

    detail = views.order_detail(order_id, uow)

    assert detail["is_complete"] is True
    assert detail["result_id"] == result_id
    assert detail["bacteriologist"] == {"document_id": 9, "first_name": "Louis", "last_name": "Pasteur"}
    assert datetime.fromisoformat(detail["result_date"]) >= datetime.fromisoformat(detail["created_at"])


def test_patient_orders_list_view(uow):
    first = place_order(uow)
    second = place_order(uow)
    messagebus.handle(AttachResult(order_id=first, bacteriologist_id="bact-1"), uow)

    listed = views.patient_orders(uow, username="alopez77")

    assert [v["order_id"] for v in listed] == [first, second]
    assert RESULT_FIELDS <= set(listed[0])
    assert RESULT_FIELDS.isdisjoint(listed[1])
    assert all("doctor" not in v for v in listed)


@pytest.mark.parametrize(
    "participants",
    [
        dict(patient_id="nobody", doctor_id="doctor-1"),
        dict(patient_id="patient-1", doctor_id="nobody"),
    ],
)
def test_create_order_for_unknown_participant(uow, participants):
    with pytest.raises(NotFound):
        messagebus.handle(CreateOrder(exam_type_id="exam-cbc", **participants), uow)

    with uow:
        assert uow.orders.list() == []


def test_attach_result_with_unknown_bacteriologist_keeps_listing_intact(uow):
    first = place_order(uow)
    second = place_order(uow)

    with pytest.raises(NotFound):
        messagebus.handle(AttachResult(order_id=first, bacteriologist_id="nobody"), uow)

    listed = views.patient_orders(uow, patient="patient-1")
    assert [v["order_id"] for v in listed] == [first, second]
    assert all(v["is_complete"] is False for v in listed)

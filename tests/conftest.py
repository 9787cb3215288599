# pylint: disable=redefined-outer-name
import os
from datetime import datetime, timezone

# bcrypt's minimum work factor keeps the suite fast
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import clear_mappers, sessionmaker
from sqlalchemy.pool import StaticPool

from accounts.adapters import repository as user_repository
from accounts.domain.model import User
from accounts.service_layer.unit_of_work import AccountsUnitOfWork
from orders.adapters import repository as order_repository
from orders.domain.model import Exam
from orders.service_layer.unit_of_work import OrdersUnitOfWork
from shared.adapters.notifications import AbstractNotifier, NotificationError


class FakeUserRepository(user_repository.AbstractRepository):
    def __init__(self, users=()):
        super().__init__()
        self._users = {u.user_id: u for u in users}
        self.username_lookups = 0

    def _add(self, user):
        self._users[user.user_id] = user

    def _get(self, user_id):
        return self._users.get(user_id)

    def _get_by_username(self, username):
        self.username_lookups += 1
        return next((u for u in self._users.values() if u.username == username), None)

    def _find_by_login(self, login):
        return [u for u in self._users.values() if login in (u.username, u.email)]

    def _list(self, criteria):
        return [u for u in self._users.values() if all(c.matches(u) for c in criteria)]


class FakeOrderRepository(order_repository.AbstractOrderRepository):
    def __init__(self, orders=()):
        super().__init__()
        self._orders = list(orders)

    def _add(self, order):
        self._orders.append(order)

    def _get(self, order_id):
        return next((o for o in self._orders if o.order_id == order_id), None)

    def _list(self, patient_id, is_complete):
        return [
            o for o in self._orders
            if (patient_id is None or o.patient_id == patient_id)
            and (is_complete is None or o.is_complete == is_complete)
        ]


class FakeExamRepository(order_repository.AbstractExamRepository):
    def __init__(self, exams=()):
        self._exams = {e.exam_id: e for e in exams}

    def add(self, exam):
        self._exams[exam.exam_id] = exam
        return exam.exam_id

    def get(self, exam_id):
        return self._exams.get(exam_id)


class FakeResultRepository(order_repository.AbstractResultRepository):
    def __init__(self, results=()):
        self._results = {r.result_id: r for r in results}

    def add(self, result):
        self._results[result.result_id] = result
        return result.result_id

    def get(self, result_id):
        return self._results.get(result_id)


class FakeAccountsUnitOfWork(AccountsUnitOfWork):
    def __init__(self, users=()):
        self.users = FakeUserRepository(users)
        self.committed = False

    def _commit(self):
        self.committed = True

    def rollback(self):
        pass


class FakeOrdersUnitOfWork(OrdersUnitOfWork):
    def __init__(self, orders=(), exams=(), results=(), users=()):
        self.orders = FakeOrderRepository(orders)
        self.exams = FakeExamRepository(exams)
        self.results = FakeResultRepository(results)
        self.users = FakeUserRepository(users)
        self.committed = False

    def _commit(self):
        self.committed = True

    def rollback(self):
        pass


class FakeNotifier(AbstractNotifier):
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html):
        if self.fail:
            raise NotificationError(f"Mailbox {to} unavailable")
        self.sent.append(dict(to=to, subject=subject, html=html))


def make_user(user_id, first_name, last_name, username, **kwargs):
    defaults = dict(
        document_id=1000,
        email=f"{username}@example.org",
        password="$2b$04$notarealhash",
        role="patient",
        is_active=True,
    )
    defaults.update(kwargs)
    return User(user_id=user_id, first_name=first_name, last_name=last_name, username=username, **defaults)


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def valid_user_data():
    return {
        "first_name": "José",
        "last_name": "Pérez Gómez",
        "document_id": 1234,
        "email": "jose.perez@example.org",
        "role": "patient",
    }


@pytest.fixture
def sqlite_session_factory():
    """Create SQLite in-memory database for fast testing."""
    from accounts.adapters import orm as accounts_orm
    from orders.adapters import orm as orders_orm

    # one shared connection so worker threads (TestClient) see the same database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    accounts_orm.metadata.create_all(engine)
    orders_orm.metadata.create_all(engine)
    accounts_orm.start_mappers()
    orders_orm.start_mappers()

    yield sessionmaker(bind=engine)

    clear_mappers()
    engine.dispose()


@pytest.fixture
def seeded_session_factory(sqlite_session_factory):
    """Database holding one exam, a doctor, a patient and a bacteriologist."""
    session = sqlite_session_factory()
    session.add(Exam(exam_id="exam-cbc", name="Complete Blood Count", short_name="CBC", scheduled_days=3))
    session.add(make_user("doctor-1", "Gregory", "House", "ghouse42", document_id=42, role="doctor"))
    session.add(make_user("patient-1", "Ana", "Lopez", "alopez77", document_id=77))
    session.add(make_user("bact-1", "Louis", "Pasteur", "lpasteur9", document_id=9, role="bacteriologist"))
    session.commit()
    session.close()
    return sqlite_session_factory


@pytest.fixture
def order_created_at():
    return datetime(2023, 1, 1, tzinfo=timezone.utc)

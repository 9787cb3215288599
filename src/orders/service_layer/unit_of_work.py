from __future__ import annotations
from sqlalchemy.orm.session import Session

from accounts.adapters import repository as user_repository
from orders.adapters import repository
from shared.service_layer.unit_of_work import AbstractUnitOfWork, DEFAULT_SESSION_FACTORY


class OrdersUnitOfWork(AbstractUnitOfWork):
    orders: repository.AbstractOrderRepository
    exams: repository.AbstractExamRepository
    results: repository.AbstractResultRepository
    users: user_repository.AbstractRepository

    def collect_new_events(self):
        for order in self.orders.seen:
            while order.events:
                yield order.events.pop(0)


class SqlAlchemyUnitOfWork(OrdersUnitOfWork):
    def __init__(self, session_factory=DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self):
        self.session = self.session_factory()  # type: Session
        self.orders = repository.SqlAlchemyOrderRepository(self.session)
        self.exams = repository.SqlAlchemyExamRepository(self.session)
        self.results = repository.SqlAlchemyResultRepository(self.session)
        # participants live in the accounts tables of the same database
        self.users = user_repository.SqlAlchemyRepository(self.session)
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.session.close()

    def _commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

from __future__ import annotations
from sqlalchemy.orm.session import Session

from accounts.adapters import repository
from shared.service_layer.unit_of_work import AbstractUnitOfWork, DEFAULT_SESSION_FACTORY


class AccountsUnitOfWork(AbstractUnitOfWork):
    users: repository.AbstractRepository


class SqlAlchemyUnitOfWork(AccountsUnitOfWork):
    def __init__(self, session_factory=DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self):
        self.session = self.session_factory()  # type: Session
        self.users = repository.SqlAlchemyRepository(self.session)
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.session.close()

    def _commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

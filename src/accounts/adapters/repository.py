import abc
import logging
from typing import List, Optional, Set

from sqlalchemy import or_

from accounts.adapters import orm
from accounts.domain import model
from accounts.domain.filters import Criterion, MatchRule

logger = logging.getLogger(__name__)


class AbstractRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.User]

    def add(self, user: model.User) -> str:
        self._add(user)
        self.seen.add(user)
        return user.user_id

    def get(self, user_id) -> Optional[model.User]:
        user = self._get(user_id)
        if user:
            self.seen.add(user)
        return user

    def get_by_username(self, username: str) -> Optional[model.User]:
        return self._get_by_username(username)

    def find_by_login(self, login: str) -> List[model.User]:
        """Users whose username or e-mail equals login."""
        return self._find_by_login(login)

    def get_by_login(self, login: str) -> Optional[model.User]:
        """
        The one user a login refers to, or None if there is none or it is ambiguous.

        An exact username match wins over other users holding login as their e-mail.
        """
        matches = self.find_by_login(login)
        if len(matches) > 1:
            matches = [user for user in matches if user.username == login]
        if len(matches) != 1:
            return None
        self.seen.add(matches[0])
        return matches[0]

    def list(self, criteria: List[Criterion] = ()) -> List[model.User]:
        users = self._list(list(criteria))
        for user in users:
            self.seen.add(user)
        return users

    def update(self, user_id, changes: dict) -> Optional[str]:
        """Apply a partial update. Returns the user_id, or None if the user does not exist."""
        user = self._get(user_id)
        if user is None:
            return None
        user.apply_changes(changes)
        self.seen.add(user)
        return user.user_id

    @abc.abstractmethod
    def _add(self, user: model.User):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, user_id) -> Optional[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _get_by_username(self, username) -> Optional[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _find_by_login(self, login) -> List[model.User]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self, criteria: List[Criterion]) -> List[model.User]:
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, user):
        self.session.add(user)

    def _get(self, user_id):
        return self.session.query(model.User).filter_by(user_id=user_id).first()

    def _get_by_username(self, username):
        return self.session.query(model.User).filter_by(username=username).first()

    def _find_by_login(self, login):
        return (
            self.session.query(model.User)
            .filter(or_(orm.users.c.username == login, orm.users.c.email == login))
            .all()
        )

    def _list(self, criteria):
        query = self.session.query(model.User)
        for criterion in criteria:
            query = query.filter(self._clause(criterion))
        return query.order_by(orm.users.c.last_name, orm.users.c.first_name).all()

    @staticmethod
    def _clause(criterion: Criterion):
        column = orm.users.c[criterion.field]
        if criterion.rule is MatchRule.SUBSTRING:
            return column.ilike(f"%{criterion.value}%")
        return column == criterion.value

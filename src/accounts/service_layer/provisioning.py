"""User provisioning: unique usernames, issued passwords and welcome mail."""

from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

from accounts.domain.filters import build_criteria
from accounts.domain.model import User
from accounts.domain.schemas import UserSchema, UserUpdateSchema
from accounts.service_layer.unit_of_work import AccountsUnitOfWork
from shared.adapters.notifications import AbstractNotifier, NotificationError
from shared.domain.exceptions import (
    BadRequest,
    InsecureCredential,
    NotFound,
    NotificationFailed,
    ProvisioningExhausted,
)
from shared.services import credentials, templates
from shared.services.validation import validate

logger = logging.getLogger(__name__)

MAX_USERNAME_ATTEMPTS = 100
DISCRIMINATOR_RANGE = (4, 100)


@dataclass(frozen=True)
class ProvisionedUser:
    id: str
    username: str
    error: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "error": self.error}


@dataclass(frozen=True)
class ProvisioningFailure:
    user: Any
    index: int
    reason: str
    error: bool = True

    def to_dict(self) -> dict:
        return {"user": self.user, "index": self.index, "error": self.error, "reason": self.reason}


BulkResult = Union[ProvisionedUser, ProvisioningFailure]


class UserProvisioningService:
    def __init__(self, uow: AccountsUnitOfWork, notifier: Optional[AbstractNotifier] = None):
        self.uow = uow
        self.notifier = notifier

    def allocate_username(self, first_name: str, last_name: str, document_id) -> str:
        """
        Find a free username for a person.

        The document id is tried first, after that random discriminators. Every
        candidate checked counts against MAX_USERNAME_ATTEMPTS.

        Must be called inside an open unit of work.

        Raises:
            ProvisioningExhausted: If every attempt collided
        """
        candidates = self._candidates(first_name, last_name, document_id)

        for attempt, candidate in zip(range(1, MAX_USERNAME_ATTEMPTS + 1), candidates):
            if self.uow.users.get_by_username(candidate) is None:
                if attempt > 1:
                    logger.info(f"Allocated username {candidate} after {attempt} attempts")
                return candidate

        logger.error(
            f"No free username for {first_name} {last_name} after {MAX_USERNAME_ATTEMPTS} attempts"
        )
        raise ProvisioningExhausted("Username cannot be generated, try to create again")

    @staticmethod
    def _candidates(first_name, last_name, document_id) -> Iterator[str]:
        yield credentials.derive_username(first_name, last_name, document_id)
        while True:
            yield credentials.derive_username(
                first_name, last_name, credentials.random_discriminator(*DISCRIMINATOR_RANGE)
            )

    def issue_password(self) -> str:
        secret = credentials.generate_password()
        if not credentials.is_secure(secret):
            logger.error("Password generator produced a secret that fails the policy")
            raise InsecureCredential("Generated password does not satisfy the password policy")
        return secret

    def create_user(self, user_data: Dict[str, Any], notify: bool = True) -> ProvisionedUser:
        """
        Create a user with a unique username and a freshly issued password.

        Flow:
        1. Validate payload
        2. Allocate a free username
        3. Issue and hash a password
        4. Optionally mail the credentials; nothing is stored if that fails
        5. Persist and commit

        Raises:
            ValidationError, ProvisioningExhausted, InsecureCredential, NotificationFailed
        """
        data = validate(user_data, UserSchema)

        with self.uow:
            username = self.allocate_username(data.first_name, data.last_name, data.document_id)

            secret = self.issue_password()
            hashed = credentials.hash_password(secret)

            if notify:
                self._send_welcome(data, username, secret)

            user = User(
                user_id=str(uuid.uuid4()),
                username=username,
                password=hashed,
                **data.model_dump(),
            )
            user_id = self.uow.users.add(user)
            self.uow.commit()

        logger.info(f"Created user {user_id} with username {username}")
        return ProvisionedUser(id=user_id, username=username)

    def _send_welcome(self, data: UserSchema, username: str, secret: str) -> None:
        if self.notifier is None:
            raise NotificationFailed("No notifier configured for welcome e-mail")
        html = templates.welcome_email(name=data.first_name, username=username, password=secret)
        try:
            self.notifier.send(to=data.email, subject=templates.WELCOME_SUBJECT, html=html)
        except NotificationError as e:
            logger.error(f"Welcome e-mail to {data.email} failed: {e}")
            raise NotificationFailed(
                "Email cannot be sent, please check your email registration"
            ) from e

    def create_users(self, users: List[Dict[str, Any]]) -> List[BulkResult]:
        """Create many users without mail; one failing item never stops the others."""
        results = []  # type: List[BulkResult]
        for index, user_data in enumerate(users):
            try:
                created = self.create_user(user_data, notify=False)
                results.append(created)
            except Exception as e:
                logger.warning(f"Bulk item {index} failed: {e}")
                results.append(ProvisioningFailure(user=user_data, index=index, reason=str(e)))

        failed = sum(1 for r in results if r.error)
        logger.info(f"Bulk creation finished: {len(results) - failed} created, {failed} failed")
        return results

    def get_user(self, username: str) -> Optional[dict]:
        """Look a user up by username or e-mail."""
        if not username:
            return None
        with self.uow:
            user = self.uow.users.get_by_login(username)
            return user.to_dict() if user else None

    def get_user_by_id(self, user_id: str) -> dict:
        with self.uow:
            user = self.uow.users.get(user_id)
            if user is None:
                raise NotFound(f"User {user_id} not found")
            return user.to_dict()

    def get_users(self, filters: Dict[str, Any]) -> List[dict]:
        """
        Search users; all filters must match.

        Raises:
            BadRequest: On unknown filters or unusable values
            NotFound: If nothing matches
        """
        criteria, name_term = build_criteria(filters)

        with self.uow:
            users = self.uow.users.list(criteria)
            if name_term:
                users = [user for user in users if user.matches_name(name_term)]
            found = [user.to_dict() for user in users]

        if not found:
            raise NotFound("No users match the given filters")
        return found

    def update_user(self, user_id: str, user: Dict[str, Any]) -> str:
        """
        Apply a partial update and return the user's username.

        Raises:
            BadRequest: If the update is empty
            ValidationError: If the update contains unknown or invalid fields
            NotFound: If the user does not exist
        """
        if not user:
            raise BadRequest("Update payload is empty")
        changes = validate(user, UserUpdateSchema).model_dump(exclude_unset=True)

        with self.uow:
            updated_id = self.uow.users.update(user_id, changes)
            if updated_id is None:
                raise NotFound(f"User {user_id} not found")
            username = self.uow.users.get(updated_id).username
            self.uow.commit()

        logger.info(f"Updated user {user_id} fields {sorted(changes)}")
        return username

"""Domain model for user accounts."""

from dataclasses import dataclass
from typing import Optional


@dataclass(unsafe_hash=True)
class User:
    user_id: str               # UUID4 as String
    first_name: str
    last_name: str
    document_id: int           # national id, also the default username discriminator
    email: str
    username: str
    password: str              # bcrypt hash, never plaintext
    role: str = "patient"      # 'patient' | 'doctor' | 'bacteriologist' | 'admin'
    is_active: bool = True
    contact_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def matches_name(self, term: str) -> bool:
        """Case-insensitive match of term against "first last" or "last first"."""
        needle = term.strip().lower()
        forward = f"{self.first_name} {self.last_name}".lower()
        backward = f"{self.last_name} {self.first_name}".lower()
        return needle in forward or needle in backward

    def apply_changes(self, changes: dict) -> None:
        for key, value in changes.items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        """Public representation; the password hash is never exposed."""
        return {
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "document_id": self.document_id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "is_active": self.is_active,
            "contact_number": self.contact_number,
        }

"""Username derivation and password issuing for new accounts."""

import re
import secrets
import string
import unicodedata

import bcrypt

import config

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "!@#$%&*?-_+="

PASSWORD_MIN_LENGTH = 12
_CHARACTER_CLASSES = (LOWERCASE, UPPERCASE, DIGITS, SYMBOLS)


def normalize_name(value: str) -> str:
    """Lower-case, strip diacritics and drop anything that is not a letter or digit."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    ascii_only = decomposed.encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM_RE.sub("", ascii_only.lower())


def derive_username(first_name: str, last_name: str, discriminator) -> str:
    """
    Build a candidate username from a person's name and a discriminator.

    The first letter of the first name is joined with the first token of
    the last name and the discriminator, e.g. ("José", "Pérez Gómez", 1234)
    gives "jperez1234". The result is deterministic; uniqueness has to be
    checked by the caller.
    """
    first = normalize_name(first_name)
    surname_tokens = (last_name or "").split()
    surname = normalize_name(surname_tokens[0]) if surname_tokens else ""
    if not first or not surname:
        raise ValueError("first_name and last_name must contain letters or digits")

    suffix = normalize_name(str(discriminator))
    return f"{first[0]}{surname}{suffix}"


def random_discriminator(minimum: int, maximum: int) -> str:
    """Random integer in [minimum, maximum] rendered as a numeral string."""
    if minimum > maximum:
        raise ValueError(f"Invalid range: {minimum} > {maximum}")
    return str(minimum + secrets.randbelow(maximum - minimum + 1))


def generate_password(length: int = PASSWORD_MIN_LENGTH) -> str:
    """Generate a random password holding at least one character of every class."""
    if length < len(_CHARACTER_CLASSES):
        raise ValueError(f"Password length must be at least {len(_CHARACTER_CLASSES)}")

    alphabet = "".join(_CHARACTER_CLASSES)
    chars = [secrets.choice(group) for group in _CHARACTER_CLASSES]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def is_secure(secret: str) -> bool:
    """Check a password against the policy: minimum length, no whitespace, all classes present."""
    if not secret or len(secret) < PASSWORD_MIN_LENGTH:
        return False
    if any(ch.isspace() for ch in secret):
        return False
    return all(any(ch in group for ch in secret) for group in _CHARACTER_CLASSES)


def hash_password(secret: str) -> str:
    """Salted bcrypt hash of a password, returned as text."""
    salt = bcrypt.gensalt(rounds=config.get_bcrypt_rounds())
    return bcrypt.hashpw(secret.encode("utf-8"), salt).decode("utf-8")


def verify_password(secret: str, hashed: str) -> bool:
    return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))

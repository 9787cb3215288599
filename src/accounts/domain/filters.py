"""
Search criteria for user listings.

Every searchable field is bound to one match rule. Filters coming from the
API are turned into Criterion objects which repositories evaluate either in
SQL or in memory. All criteria are combined with AND.
"""

import enum
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from shared.domain.exceptions import BadRequest

_NUMERIC_RE = re.compile(r"^-?\d+$")
_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}

NAME_FILTER = "name"


class MatchRule(enum.Enum):
    EXACT = "exact"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    SUBSTRING = "substring"


FIELD_RULES = {
    "username": MatchRule.EXACT,
    "role": MatchRule.EXACT,
    "document_id": MatchRule.NUMERIC,
    "is_active": MatchRule.BOOLEAN,
    "first_name": MatchRule.SUBSTRING,
    "last_name": MatchRule.SUBSTRING,
    "email": MatchRule.SUBSTRING,
    "contact_number": MatchRule.SUBSTRING,
}


@dataclass(frozen=True)
class Criterion:
    field: str
    rule: MatchRule
    value: Any

    def matches(self, record) -> bool:
        actual = getattr(record, self.field, None)
        if actual is None:
            return False
        if self.rule is MatchRule.SUBSTRING:
            return str(self.value).lower() in str(actual).lower()
        if self.rule is MatchRule.NUMERIC:
            return int(actual) == self.value
        return actual == self.value


def looks_numeric(value: Any) -> bool:
    return _NUMERIC_RE.match(str(value).strip()) is not None


def _coerce(field: str, rule: MatchRule, value: Any) -> Any:
    if rule is MatchRule.NUMERIC:
        if not looks_numeric(value):
            raise BadRequest(f"Filter '{field}' expects a number, got '{value}'")
        return int(str(value).strip())

    if rule is MatchRule.BOOLEAN:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise BadRequest(f"Filter '{field}' expects true or false, got '{value}'")

    return str(value).strip()


def build_criteria(filters: Dict[str, Any]) -> Tuple[List[Criterion], Optional[str]]:
    """
    Translate raw filters into criteria.

    Returns:
        (criteria, name_term) where name_term is applied after the fetch
        against the person's full name in either order.

    Raises:
        BadRequest: On an unknown field or a value the field's rule cannot use
    """
    criteria = []
    name_term = None

    for field, value in (filters or {}).items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if field == NAME_FILTER:
            name_term = str(value).strip()
            continue

        rule = FIELD_RULES.get(field)
        if rule is None:
            raise BadRequest(f"Unknown filter '{field}'")
        criteria.append(Criterion(field=field, rule=rule, value=_coerce(field, rule, value)))

    return criteria, name_term

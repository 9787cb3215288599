"""Validation gate: checks incoming payloads against pydantic schemas."""

import logging
from typing import Any, Dict, Type, TypeVar

import pydantic
from pydantic import BaseModel

from shared.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate(payload: Dict[str, Any], schema: Type[SchemaT]) -> SchemaT:
    """
    Validate payload against schema.

    Returns:
        The parsed schema instance

    Raises:
        ValidationError: If the payload violates the schema
    """
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        )
        logger.info(f"Rejected {schema.__name__} payload: {problems}")
        raise ValidationError(f"Invalid {schema.__name__}: {problems}") from e

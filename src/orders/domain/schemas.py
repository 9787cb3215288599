"""Pydantic schemas guarding order payloads."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class OrderSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    patient_id: str = Field(min_length=1)
    doctor_id: str = Field(min_length=1)
    exam_type_id: str = Field(min_length=1)


class ResultSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    order_id: str = Field(min_length=1)
    bacteriologist_id: str = Field(min_length=1)
    payload: Dict[str, Any] = Field(default_factory=dict)

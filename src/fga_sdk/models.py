"""Pydantic models for OpenFGA requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator


class ConsistencyPreference(str, Enum):
    UNSPECIFIED = "UNSPECIFIED"
    MINIMIZE_LATENCY = "MINIMIZE_LATENCY"
    HIGHER_CONSISTENCY = "HIGHER_CONSISTENCY"


class RelationshipCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    context: Optional[Dict[str, Any]] = None


class TupleKey(BaseModel):
    """A relationship fact ``(user, relation, object)``."""

    model_config = ConfigDict(frozen=True)

    user: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    object: str = Field(..., min_length=1)
    condition: Optional[RelationshipCondition] = None

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.user, self.relation, self.object)

    def __hash__(self) -> int:
        # condition.context is a dict, so hash on the fact itself
        return hash(self.identity)

    def __str__(self) -> str:
        return f"{self.object}#{self.relation}@{self.user}"


class CheckRequest(BaseModel):
    user: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    object: str = Field(..., min_length=1)
    contextual_tuples: List[TupleKey] = Field(default_factory=list)
    context: Optional[Dict[str, Any]] = None
    consistency: Optional[ConsistencyPreference] = None


class CheckResult(BaseModel):
    """Outcome of a check.

    Every response field other than ``allowed`` (OpenFGA's ``resolution``
    for instance) is kept in ``resolution_metadata``.
    """

    model_config = ConfigDict(frozen=True)

    allowed: StrictBool
    resolution_metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _collect_resolution_metadata(cls, data: Any) -> Any:
        if isinstance(data, dict) and "resolution_metadata" not in data:
            extra = {key: value for key, value in data.items() if key != "allowed"}
            return {"allowed": data.get("allowed"), "resolution_metadata": extra or None}
        return data


class ExpandRequest(BaseModel):
    relation: str = Field(..., min_length=1)
    object: str = Field(..., min_length=1)
    consistency: Optional[ConsistencyPreference] = None


class ExpandResult(BaseModel):
    tree: Dict[str, Any]


class ListObjectsRequest(BaseModel):
    user: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    contextual_tuples: List[TupleKey] = Field(default_factory=list)
    context: Optional[Dict[str, Any]] = None
    consistency: Optional[ConsistencyPreference] = None


class ListObjectsResult(BaseModel):
    objects: List[str]


class ReadRequest(BaseModel):
    """Tuple filter for ``read``; leaving every field unset reads the whole store."""

    user: Optional[str] = None
    relation: Optional[str] = None
    object: Optional[str] = None
    page_size: Optional[int] = Field(default=None, ge=1, le=100)
    continuation_token: Optional[str] = None
    consistency: Optional[ConsistencyPreference] = None


class _Page(BaseModel):
    continuation_token: Optional[str] = None

    @field_validator("continuation_token", mode="before")
    @classmethod
    def _empty_token_is_none(cls, value: Any) -> Any:
        return value or None


class RelationshipTuple(BaseModel):
    key: TupleKey
    timestamp: datetime


class ReadResult(_Page):
    tuples: List[RelationshipTuple] = Field(default_factory=list)


class Store(BaseModel):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ListStoresResult(_Page):
    stores: List[Store] = Field(default_factory=list)


class AuthorizationModelDefinition(BaseModel):
    """Body of ``write_authorization_model`` (the JSON form of an FGA model)."""

    schema_version: str = "1.1"
    type_definitions: List[Dict[str, Any]] = Field(..., min_length=1)
    conditions: Optional[Dict[str, Any]] = None


class AuthorizationModel(AuthorizationModelDefinition):
    id: str


class ReadAuthorizationModelsResult(_Page):
    authorization_models: List[AuthorizationModel] = Field(default_factory=list)


class WriteAuthorizationModelResult(BaseModel):
    authorization_model_id: str


class TupleChange(BaseModel):
    tuple_key: TupleKey
    operation: str
    timestamp: datetime


class ReadChangesResult(_Page):
    changes: List[TupleChange] = Field(default_factory=list)


__all__ = [
    "AuthorizationModel",
    "AuthorizationModelDefinition",
    "CheckRequest",
    "CheckResult",
    "ConsistencyPreference",
    "ExpandRequest",
    "ExpandResult",
    "ListObjectsRequest",
    "ListObjectsResult",
    "ListStoresResult",
    "ReadAuthorizationModelsResult",
    "ReadChangesResult",
    "ReadRequest",
    "ReadResult",
    "RelationshipCondition",
    "RelationshipTuple",
    "Store",
    "TupleChange",
    "TupleKey",
    "WriteAuthorizationModelResult",
]

"""Pydantic schemas for registry and index service payloads."""

from typing import List, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: str = "Unknown error"
    code: str = "UNKNOWN"


class InstallTypeRequest(BaseModel):
    """Request model for installing an empty type record."""
    type: str


class AttributeInfoPayload(BaseModel):
    """Attribute info entry of a type record."""
    name: str
    public_name: str
    type: str
    searchable: Optional[bool] = None
    viewable: Optional[bool] = None
    editable: Optional[bool] = None


class TypeRecordResponse(BaseModel):
    """Response model for a single type record."""
    type: str
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    preferred_app: Optional[str] = None
    sniffer_rule: Optional[str] = None
    extensions: Optional[List[str]] = None
    attributes: Optional[List[AttributeInfoPayload]] = None
    icon: Optional[str] = None


class ListTypesResponse(BaseModel):
    """Response model for type listing."""
    types: List[TypeRecordResponse]


class CreateIndexRequest(BaseModel):
    """Request model for creating an attribute index."""
    name: str
    type: str

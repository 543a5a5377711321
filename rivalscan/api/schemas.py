"""Pydantic schemas for API request/response models."""

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Business name as listed on Google Maps")
    city: str = Field(..., min_length=1, description="City the business is in")


class AnalyzeResponse(BaseModel):
    report_id: str


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None

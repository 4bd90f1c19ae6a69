"""
Pydantic schemas for adding tests and completions.
"""
import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TestBase(BaseModel):
    """Base test schema."""

    subject: str
    topic: Optional[str] = None
    date_or_id: str
    qualification_level: Optional[str] = None
    exam_board: Optional[str] = None
    paper_link: Optional[str] = None
    mark_scheme_link: Optional[str] = None
    comments: Optional[str] = None


class TestCreate(TestBase):
    """Schema for test creation."""


class CompletionBase(BaseModel):
    """Base completion schema."""

    achieved_mark: int = Field(..., ge=0)
    total_marks: int = Field(..., ge=0)
    date: Optional[datetime.date] = None
    comments: Optional[str] = None


class CompletionCreate(CompletionBase):
    """Schema for completion creation."""

    pass

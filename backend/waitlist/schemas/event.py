"""
Pydantic schemas for events.

Registration window bounds and the event date are kept as the strings the
organizer entered (REGISTRATION_TIME_FORMAT); they are parsed only when a
rule needs them.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Event(BaseModel):
    id: str
    name: str
    description: str = ""
    location: str = ""
    event_date_time: str
    registration_open: Optional[str] = None
    registration_close: Optional[str] = None
    organizer_id: str
    max_capacity: Optional[int] = None  # None = unlimited
    open: bool = True


class EventCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    event_date_time: str
    registration_open: str
    registration_close: str
    max_capacity: Optional[int] = None


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    event_date_time: Optional[str] = None
    registration_open: Optional[str] = None
    registration_close: Optional[str] = None
    max_capacity: Optional[int] = None
    open: Optional[bool] = None

"""Time slot schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field


class TimeSlotCreate(BaseModel):
    """Times are HH:MM, 24-hour clock"""

    startTime: str
    endTime: str
    order: Optional[int] = Field(default=None, ge=1)
    isActive: bool = True


class TimeSlotUpdate(BaseModel):
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    isActive: Optional[bool] = None


class TimeSlotResponse(BaseModel):
    id: str
    label: str
    startTime: str
    endTime: str
    order: int
    isActive: bool


class MessageResponse(BaseModel):
    message: str

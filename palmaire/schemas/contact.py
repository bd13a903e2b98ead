from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, Dict, Any


class ContactCreate(BaseModel):
    """Website contact form"""
    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=30)
    message: str = Field(..., min_length=10, max_length=5000)
    preferred_dates: Optional[str] = Field(None, max_length=200)
    unit_id: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    guests: Optional[str] = None

    @field_validator('name', 'message', mode='before')
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ContactResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Dict[str, Any]] = None

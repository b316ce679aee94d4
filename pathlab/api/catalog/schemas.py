from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class ParameterDefinition(BaseModel):
    name: str
    unit: str = ""
    normal_range: str = ""
    code: Optional[str] = None


class LabTestCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    category: str
    price: Decimal = Field(..., ge=0)
    duration: str
    description: Optional[str] = None
    parameters: List[ParameterDefinition] = Field(..., min_length=1)


class LabTestResponse(BaseModel):
    id: str
    code: str
    name: str
    category: str
    price: Decimal
    duration: str
    description: Optional[str] = None
    parameters: List[ParameterDefinition] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LabTestSummary(BaseModel):
    id: str
    code: str
    name: str
    price: Decimal

    class Config:
        from_attributes = True

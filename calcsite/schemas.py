from pydantic import BaseModel, Field, field_validator
from typing import Optional, List


class CalculatorInfo(BaseModel):
    slug: str
    title: str
    category: str
    description: str


class CategoryGroup(BaseModel):
    category: str
    calculators: List[CalculatorInfo]


class CatalogResponse(BaseModel):
    categories: List[CategoryGroup]
    popular: List[CalculatorInfo]
    pages: List[str]


class SitemapResponse(BaseModel):
    urls: List[str]


class CalculateRequest(BaseModel):
    fields: dict = Field(default_factory=dict)  # {field_name: value, ...}


class CalculateResponse(BaseModel):
    slug: str
    calculator_used: str
    result: dict


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)

    @field_validator("name", "email", "subject", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def looks_like_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("must be an email address")
        return value


class ContactResponse(BaseModel):
    status: str  # "success" | "error"
    message: str
    fallback_email: Optional[str] = None

"""
Pydantic schemas for free package issuance.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminPackageRequest(BaseModel):
    program: str = Field(..., min_length=1, max_length=100)
    lessons: int = Field(..., gt=0, le=100)
    customer_email: EmailStr = Field(..., alias="customerEmail")
    promo_code: str = Field(..., alias="promoCode", min_length=1, max_length=64)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class PromoPackageRequest(BaseModel):
    program: str = Field(..., min_length=1, max_length=100)
    promo_code: str = Field(..., alias="promoCode", min_length=1, max_length=64)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class PackageIssuedResponse(BaseModel):
    success: bool = True
    package_code: str = Field(..., alias="packageCode")
    message: str

    model_config = ConfigDict(populate_by_name=True)

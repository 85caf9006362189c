from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, Enum):
    guest = "guest"
    seller = "seller"
    admin = "admin"


# Auth
class TokenRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr


class Token(BaseModel):
    token: str


# Users
class UserCreate(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None
    role: Role = Role.guest


class RoleUpdate(BaseModel):
    role: Role


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    photo: Optional[str] = None


# Medicines
class MedicineIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    itemName: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    perUnitPrice: float = Field(..., ge=0)
    # stored as entered: the storefront sends either "10" or 10
    discount: Union[float, str, None] = 0
    email: Optional[EmailStr] = None


class MedicineUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    itemName: Optional[str] = None
    category: Optional[str] = None
    perUnitPrice: Optional[float] = Field(None, ge=0)
    discount: Union[float, str, None] = None


# Categories
class CategoryIn(BaseModel):
    categoryName: str = Field(..., min_length=1)
    categoryImage: Optional[str] = None
    companyName: Optional[str] = None


class CategoryUpdate(BaseModel):
    categoryName: Optional[str] = None
    categoryImage: Optional[str] = None
    companyName: Optional[str] = None


# Cart
class CartItemIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    medicineId: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=0)


class QuantityUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


# Advertisements
class AdvertisementIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    medicineId: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


# Orders
class OrderItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    medicineId: str
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    buyer: EmailStr
    totalAmount: float = Field(..., gt=0)
    paymentStatus: str = Field(..., min_length=1)
    transactionId: str = Field(..., min_length=1)
    medicineItem: List[OrderItem] = Field(..., min_length=1)
    status: str


# Payments
class PaymentIntentRequest(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount in the smallest currency unit (cents)")


class PaymentIntentResponse(BaseModel):
    clientSecret: str

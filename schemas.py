"""
Record schemas for the dairy back office.

Each model is persisted as one element of a named collection in the record
store. Field names are snake_case in Python and camelCase once serialized,
which is also the shape the UI collaborators exchange.
"""
import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Unit = Literal["Ltr", "Kg", "Pcs"]
ProductType = Literal["Cow Milk", "Buffalo Milk", "Dairy Product", "Other"]
StaffRole = Literal["Delivery", "Counter Sales", "Production", "Manager"]
DeliveryStatus = Literal["Pending", "Delivered", "Returned"]
MilkType = Literal["Cow Milk", "Buffalo Milk"]


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def dump(record: BaseModel) -> dict:
    return record.model_dump(mode="json", by_alias=True)


# Inventory
class Product(Record):
    id: str = Field(..., min_length=1)
    name: str
    unit: Unit
    type: ProductType
    # No floor: invoices may drive stock negative
    stock: int = 0


# Staff
class StaffIn(Record):
    name: str = Field(..., min_length=1, max_length=100)
    role: StaffRole
    password: str = Field(..., min_length=1)
    salary: Optional[float] = Field(None, ge=0)


class Staff(StaffIn):
    id: str


class SalaryUpdate(Record):
    salary: float = Field(..., ge=0)


# Deliveries
class Delivery(Record):
    id: str
    customer_name: str
    address: str
    status: DeliveryStatus = "Pending"
    assigned_to: str
    reason: Optional[str] = None
    photo: Optional[str] = None  # data URL or link


# Invoices
class InvoiceItemIn(Record):
    product_id: str
    quantity: int = Field(..., gt=0)


class InvoiceItem(InvoiceItemIn):
    price: float = 0.0  # unit price at sale


class InvoiceIn(Record):
    customer_name: str = "Walk-in"
    items: List[InvoiceItemIn] = Field(..., min_length=1)
    submitted_by: str


class Invoice(Record):
    id: str
    customer_name: str
    date: datetime.date
    items: List[InvoiceItem]
    total: float
    submitted_by: str


class PricingRequest(Record):
    items: List[InvoiceItemIn]


class PricingResponse(Record):
    items: List[InvoiceItem]
    total: float


# Production
class ConversionLogIn(Record):
    from_product: MilkType
    from_quantity: int = Field(..., gt=0)
    to_product: str = Field(..., min_length=1)
    to_quantity: int = Field(..., gt=0)
    staff_id: str


class ConversionLog(ConversionLogIn):
    id: str
    date: datetime.date


# Routes
class DeliveryRouteIn(Record):
    name: str = Field(..., min_length=1)
    staff_id: str
    zone: str = ""
    photo: Optional[str] = None


class DeliveryRoute(DeliveryRouteIn):
    id: str


# Salaries
class SalaryPaymentIn(Record):
    staff_id: str
    amount: float = Field(..., gt=0)
    for_month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$")


class SalaryRecord(SalaryPaymentIn):
    id: str
    payment_date: datetime.date


# Dashboard
class DailyRecord(Record):
    date: datetime.date
    total_sales: float
    counter_sales: float
    delivery_sales: float
    products_delivered: int
    products_pending: int
    products_returned: int


class DeliveryStats(Record):
    delivered: int = 0
    pending: int = 0
    returned: int = 0


class DashboardData(Record):
    daily_records: List[DailyRecord]
    delivery_stats: DeliveryStats


# Auth
class AdminUser(Record):
    name: Literal["Admin"] = "Admin"


class LoginRequest(Record):
    id: str
    password: str


class LoginResult(Record):
    role: Optional[Literal["admin", "staff"]] = None
    user: Optional[Union[AdminUser, Staff]] = None


class PasswordChangeRequest(Record):
    old_password: str
    new_password: str
    confirm_password: Optional[str] = None


class ResetTokenRequest(Record):
    admin_id: str


class PasswordResetRequest(Record):
    token: str
    new_password: str
    confirm_password: Optional[str] = None


class OperationResult(Record):
    success: bool
    message: str
    token: Optional[str] = None

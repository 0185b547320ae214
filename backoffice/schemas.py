from __future__ import annotations

import datetime as dt
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice.models import DiscountMode, EventType, OrderStatus, OrderType, UserRole

MONTH_PATTERN = r'^\d{4}-(0[1-9]|1[0-2])$'
TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'


class Address(BaseModel):
    street: str = ''
    number: str = ''
    city: str = ''
    state: str = ''
    zip: str = ''
    neighborhood: str | None = None


class Customer(BaseModel):
    id: str
    name: str
    email: str = ''
    phone: str = ''
    address: Address = Field(default_factory=Address)
    cnpj: str | None = None


class Supplier(BaseModel):
    id: str
    name: str
    cnpj: str = ''
    contact: str = ''
    email: str = ''
    address: Address | None = None


class Product(BaseModel):
    id: str
    name: str
    description: str = ''
    price: Decimal = Decimal('0.00')
    cost_price: Decimal = Decimal('0.00')
    stock: int = 0
    image: str | None = None
    supplier_id: str | None = None


class StockEntry(BaseModel):
    id: str
    product_id: str
    supplier_id: str | None = None
    quantity: int
    received_at: datetime
    cost: Decimal = Decimal('0.00')


class Promotion(BaseModel):
    id: str
    name: str
    discount_percent: Decimal = Decimal('0')
    active: bool = True


class OrderItem(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class Order(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    customer_address: Address = Field(default_factory=Address)
    items: list[OrderItem]
    subtotal: Decimal
    discount_value: Decimal
    discount_percent: Decimal
    total: Decimal
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    delivery_notes: str | None = None
    signature: str | None = None
    order_type: OrderType | None = None


class CalendarEvent(BaseModel):
    id: str
    title: str
    description: str = ''
    date: dt.date
    time: str = Field(default='00:00', pattern=TIME_PATTERN)
    type: EventType = EventType.OTHER
    related_id: str | None = None
    related_name: str | None = None


class SalesGoal(BaseModel):
    id: str
    month: str = Field(pattern=MONTH_PATTERN)
    wholesale_target: Decimal = Decimal('0.00')
    retail_target: Decimal = Decimal('0.00')


class User(BaseModel):
    id: str
    username: str
    password_hash: str
    name: str
    role: UserRole


class UserOut(BaseModel):
    id: str
    username: str
    name: str
    role: UserRole


# Request payloads


class CartLineIn(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)


class DiscountIn(BaseModel):
    mode: DiscountMode = DiscountMode.VALUE
    amount: Decimal = Field(default=Decimal('0'), ge=0)


class OrderIn(BaseModel):
    customer_id: str | None = None
    items: list[CartLineIn] = Field(default_factory=list)
    discount: DiscountIn = Field(default_factory=DiscountIn)
    signature: str | None = None
    order_type: OrderType = OrderType.RETAIL
    allow_insufficient_stock: bool = False


class OrderStatusIn(BaseModel):
    status: OrderStatus
    note: str | None = None


class CustomerIn(BaseModel):
    name: str = Field(min_length=1)
    email: str = ''
    phone: str = ''
    address: Address = Field(default_factory=Address)
    cnpj: str | None = None


class SupplierIn(BaseModel):
    name: str = Field(min_length=1)
    cnpj: str = ''
    contact: str = ''
    email: str = ''
    address: Address | None = None


class ProductIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ''
    price: Decimal = Field(default=Decimal('0'), ge=0)
    cost_price: Decimal = Field(default=Decimal('0'), ge=0)
    image: str | None = None
    supplier_id: str | None = None


class StockEntryIn(BaseModel):
    product_id: str
    supplier_id: str | None = None
    quantity: int = Field(gt=0)
    cost: Decimal = Field(default=Decimal('0'), ge=0)


class PromotionIn(BaseModel):
    name: str = Field(min_length=1)
    discount_percent: Decimal = Field(default=Decimal('0'), ge=0, le=100)
    active: bool = True


class CalendarEventIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ''
    date: dt.date
    time: str = Field(pattern=TIME_PATTERN)
    type: EventType = EventType.VISIT
    related_id: str | None = None


class SalesGoalIn(BaseModel):
    month: str = Field(pattern=MONTH_PATTERN)
    wholesale_target: Decimal = Field(default=Decimal('0'), ge=0)
    retail_target: Decimal = Field(default=Decimal('0'), ge=0)


class UserIn(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.SELLER


class LoginIn(BaseModel):
    username: str
    password: str

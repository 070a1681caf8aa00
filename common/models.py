"""Records exchanged between services over HTTP and Kafka."""
import enum
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from msgspec import Meta, Struct

PositiveQuantity = Annotated[float, Meta(gt=0)]


class PaymentMethod(str, enum.Enum):
    PAYPAL = "PAYPAL"
    CREDIT_CARD = "CREDIT_CARD"
    VISA = "VISA"
    MASTER_CARD = "MASTER_CARD"
    BITCOIN = "BITCOIN"


class Address(Struct, kw_only=True):
    street: str | None = None
    house_number: str | None = None
    zip_code: str | None = None


class CustomerResponse(Struct, kw_only=True):
    id: str
    firstname: str
    lastname: str
    email: str
    address: Address | None = None


class PurchaseRequest(Struct, frozen=True):
    product_id: int
    quantity: PositiveQuantity


class PurchaseResult(Struct, frozen=True, kw_only=True):
    product_id: int
    name: str
    description: str | None = None
    price: Decimal
    quantity: float


class PaymentRequest(Struct, frozen=True, kw_only=True):
    amount: Decimal
    payment_method: PaymentMethod
    order_id: int
    order_reference: str
    customer: CustomerResponse


class OrderConfirmation(Struct, frozen=True, kw_only=True):
    order_reference: str
    total_amount: Decimal
    payment_method: PaymentMethod
    customer: CustomerResponse
    products: list[PurchaseResult]


class PaymentConfirmation(Struct, frozen=True, kw_only=True):
    order_reference: str
    amount: Decimal
    payment_method: PaymentMethod
    customer_firstname: str
    customer_lastname: str
    customer_email: str
    created_at: datetime

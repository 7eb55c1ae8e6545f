"""
SalesRecord model representing one cleaned retail transaction.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

SALES_COLUMNS = [
    "transaction_id",
    "customer_id",
    "customer_name",
    "email",
    "purchase_date",
    "product_id",
    "category",
    "price",
    "quantity",
    "total_amount",
    "payment_method",
    "delivery_status",
    "customer_address",
]


class SalesRecord(BaseModel):
    """
    A retail transaction after cleaning (the final typed schema).

    Attributes:
        transaction_id: Primary key
        customer_id: Customer identifier (never null)
        customer_name: Customer display name
        email: Contact email, absent when it failed validation
        purchase_date: Calendar date, absent when it failed validation
        product_id: Product identifier
        category: Product category
        price: Unit price, two decimal places
        quantity: Units purchased
        total_amount: price x quantity, two decimal places
        payment_method: Standardized payment method
        delivery_status: Delivery status
        customer_address: Shipping address
    """

    transaction_id: int
    customer_id: int
    customer_name: str = Field(..., min_length=1)
    email: str | None = None
    purchase_date: date | None = None
    product_id: int | None = None
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=0)
    total_amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    payment_method: str = Field(..., min_length=1)
    delivery_status: str = Field(..., min_length=1)
    customer_address: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_total_amount(self) -> "SalesRecord":
        """Validate that total_amount equals price x quantity."""
        expected = (self.price * self.quantity).quantize(Decimal("0.01"))
        if self.total_amount != expected:
            raise ValueError(
                f"total_amount {self.total_amount} != price x quantity {expected}"
            )
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": 1001,
                "customer_id": 5,
                "customer_name": "Jane Doe",
                "email": "jane@example.com",
                "purchase_date": "2024-02-14",
                "product_id": 301,
                "category": "Electronics",
                "price": "10.00",
                "quantity": 3,
                "total_amount": "30.00",
                "payment_method": "Credit Card",
                "delivery_status": "Delivered",
                "customer_address": "12 High Street"
            }
        }

"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class OrderItemSchema(BaseModel):
    id: str
    product_id: str
    quantity: int
    unit_price: float
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_id: str
    shipping_address: ShippingAddressSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "shipping_address": {
                        "street": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62704",
                        "country": "US",
                    },
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    id: str
    customer_id: str
    status: str
    payment_status: str | None = None
    payment_intent_id: str | None = None
    total_amount: float
    shipping_address: ShippingAddressSchema
    items: list[OrderItemSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            payment_status=order.payment_status,
            payment_intent_id=order.payment_intent_id,
            total_amount=order.total_amount,
            shipping_address=ShippingAddressSchema(
                street=address.street,
                city=address.city,
                state=address.state,
                postal_code=address.postal_code,
                country=address.country,
            ),
            items=[
                OrderItemSchema(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    created_at=item.created_at,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderPage(BaseModel):
    data: list[OrderResponse]
    total: int
    page: int
    size: int


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class CreatePaymentRequest(BaseModel):
    customer_id: str
    amount: int = Field(gt=0, description="Amount in minor currency units")
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    description: str | None = None
    payment_method: str
    payment_method_token: str | None = None
    order_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "amount": 4500,
                    "currency": "usd",
                    "description": "Order ord-001",
                    "payment_method": "card",
                    "payment_method_token": "tok_visa",
                    "order_id": "ord-001",
                }
            ]
        }
    }


class ReconcilePaymentRequest(BaseModel):
    status: str


class RefundPaymentRequest(BaseModel):
    amount: int | None = Field(default=None, gt=0)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"


# ---------------------------------------------------------------------------
# Payment Response Schemas
# ---------------------------------------------------------------------------
class PaymentInitiationResponse(BaseModel):
    payment_id: str
    client_secret: str | None = None
    status: str
    message: str


class PaymentResponse(BaseModel):
    id: str
    customer_id: str
    order_id: str | None = None
    amount: int
    currency: str
    description: str | None = None
    payment_method: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentResponse":
        return cls(
            id=str(payment.id),
            customer_id=str(payment.customer_id),
            order_id=str(payment.order_id) if payment.order_id else None,
            amount=payment.amount,
            currency=payment.currency,
            description=payment.description,
            payment_method=payment.payment_method,
            status=payment.status,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class PaymentPage(BaseModel):
    data: list[PaymentResponse]
    total: int
    page: int
    size: int


class WebhookResponse(BaseModel):
    received: bool = True
    outcome: str


class PaymentStatusResponse(BaseModel):
    payment_id: str
    status: str


class RefundResponse(BaseModel):
    payment_id: str
    refund_id: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str

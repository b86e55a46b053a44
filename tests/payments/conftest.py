import json
import time
from uuid import uuid4

import pytest
from protean import current_domain
from storefront.payment.initiation import InitiatePayment


@pytest.fixture()
def initiate(fake_gateway):
    """Initiate a payment through the fake gateway and return the PaymentInitiation."""

    def _initiate(**overrides):
        defaults = {
            "customer_id": "cust-001",
            "amount": 4500,
            "currency": "usd",
            "description": "Order checkout",
            "payment_method": "bank_transfer",
        }
        defaults.update(overrides)
        return current_domain.process(InitiatePayment(**defaults), asynchronous=False)

    return _initiate


@pytest.fixture()
def gateway_event():
    """Build a webhook body the way the gateway posts it."""

    def _event(event_type, data_object, event_id=None, created=None):
        return json.dumps(
            {
                "id": event_id or f"evt_{uuid4().hex[:16]}",
                "type": event_type,
                "created": created or int(time.time()),
                "data": {"object": data_object},
            }
        )

    return _event

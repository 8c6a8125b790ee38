import logging
import random
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Raised by a processor when a charge does not go through."""

    def __init__(self, message, code='payment_failed'):
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass(frozen=True)
class Receipt:
    reference: str
    amount: Decimal
    currency: str
    method: str
    processor: str
    processed_at: object = field(default_factory=timezone.now)


def make_reference(prefix, application_id):
    return f"{prefix}-{application_id}-{uuid.uuid4().hex[:10]}"


class BasePaymentProcessor:
    name = 'base'

    def charge(self, application_id, amount, currency, method='online', description=''):
        raise NotImplementedError


class SimulatedPaymentProcessor(BasePaymentProcessor):
    """Stand-in settlement that always succeeds."""
    name = 'simulated'

    def charge(self, application_id, amount, currency, method='online', description=''):
        reference = make_reference('SIM', application_id)
        logger.info(f"Simulated charge {reference} of {amount} {currency} for application {application_id}")
        return Receipt(
            reference=reference,
            amount=Decimal(str(amount)),
            currency=currency,
            method=method,
            processor=self.name,
        )


class CashPaymentProcessor(BasePaymentProcessor):
    """Physical payment handed to the worker; recorded, never sent to a gateway."""
    name = 'cash'

    def charge(self, application_id, amount, currency, method='physical', description=''):
        reference = make_reference('CASH', application_id)
        logger.info(f"Recorded cash payment {reference} of {amount} {currency} for application {application_id}")
        return Receipt(
            reference=reference,
            amount=Decimal(str(amount)),
            currency=currency,
            method=method,
            processor=self.name,
        )


class MockGatewayProcessor(BasePaymentProcessor):
    """Demo gateway that declines a share of charges at random."""
    name = 'mock_gateway'

    def __init__(self, success_rate=None, rng=None):
        if success_rate is None:
            success_rate = settings.PAYMENT_MOCK_SUCCESS_RATE
        self.success_rate = success_rate
        self.rng = rng or random.Random()

    def charge(self, application_id, amount, currency, method='online', description=''):
        if self.rng.random() >= self.success_rate:
            logger.warning(f"Mock gateway declined charge for application {application_id}")
            raise PaymentError("Payment failed. Please try again.", code='declined')
        reference = make_reference('TXN', application_id)
        return Receipt(
            reference=reference,
            amount=Decimal(str(amount)),
            currency=currency,
            method=method,
            processor=self.name,
        )


class HttpGatewayProcessor(BasePaymentProcessor):
    """Charges through a hosted gateway's JSON API."""
    name = 'http_gateway'

    def __init__(self, base_url=None, secret_key=None, timeout=10):
        self.base_url = (base_url or settings.PAYMENT_GATEWAY_BASE_URL).rstrip('/')
        self.secret_key = secret_key if secret_key is not None else settings.PAYMENT_GATEWAY_SECRET_KEY
        self.timeout = timeout

    def charge(self, application_id, amount, currency, method='online', description=''):
        reference = make_reference('job', application_id)
        payload = {
            'amount': str(amount),
            'currency': currency,
            'method': method,
            'tx_ref': reference,
            'description': description[:100],
        }
        headers = {
            'Authorization': f'Bearer {self.secret_key.strip()}',
            'Content-Type': 'application/json'
        }
        try:
            logger.info(f"Sending gateway charge {reference} for application {application_id}")
            response = requests.post(
                f"{self.base_url}/charges",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Gateway HTTP error for {reference}: {str(e)}")
            raise PaymentError(f"Payment was rejected by the gateway: {str(e)}", code='http_error') from e
        except ValueError as e:
            # JSONDecodeError subclasses both ValueError and RequestException
            logger.error(f"Gateway returned invalid JSON for {reference}: {str(e)}")
            raise PaymentError("Payment gateway returned an invalid response.", code='bad_response') from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Gateway request failed for {reference}: {str(e)}")
            raise PaymentError("Payment gateway is unreachable.", code='unreachable') from e

        if not isinstance(data, dict):
            logger.error(f"Gateway returned unexpected body for {reference}: {data!r}")
            raise PaymentError("Payment gateway returned an invalid response.", code='bad_response')

        if data.get('status') != 'success':
            logger.error(f"Gateway charge failed: {data}")
            raise PaymentError(data.get('message', 'Payment failed.'), code='declined')

        return Receipt(
            reference=(data.get('data') or {}).get('reference', reference),
            amount=Decimal(str(amount)),
            currency=currency,
            method=method,
            processor=self.name,
        )


def get_payment_processor(path=None):
    """Instantiate the processor named by ``PAYMENT_PROCESSOR``."""
    processor_class = import_string(path or settings.PAYMENT_PROCESSOR)
    return processor_class()

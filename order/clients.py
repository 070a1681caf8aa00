import asyncio
import logging
from urllib.parse import quote

import aiohttp
import msgspec

from common.errors import (
    InsufficientStockError,
    PaymentFailedError,
    ProductsNotFoundError,
    RemoteServiceError,
)
from common.models import CustomerResponse, PaymentRequest, PurchaseRequest, PurchaseResult
from order.interfaces import CustomerLookup, InventoryReservation, PaymentInitiator


class ServiceClient:
    """JSON over HTTP to one sibling service, every call bounded by ``timeout``."""

    def __init__(self, base_url: str, timeout: float, session: aiohttp.ClientSession | None = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session

    async def start(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))

    async def close(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _request(self, method: str, path: str, payload=None) -> tuple[int, bytes]:
        await self.start()
        data = msgspec.json.encode(payload) if payload is not None else None
        url = f"{self.base_url}{path}"
        try:
            async with self._session.request(
                method, url, data=data, headers={'Content-Type': 'application/json'}
            ) as response:
                return response.status, await response.read()
        except asyncio.TimeoutError as e:
            raise RemoteServiceError(f"Timeout calling {method} {url}") from e
        except aiohttp.ClientError as e:
            raise RemoteServiceError(f"Error calling {method} {url}: {e}") from e


def path_segment(value: str) -> str | None:
    """``value`` escaped as a single path segment, None when it cannot name a resource."""
    if value in ('', '.', '..'):
        return None
    return quote(value, safe='')


def error_code(body: bytes) -> str | None:
    try:
        return msgspec.json.decode(body).get('error')
    except (msgspec.DecodeError, AttributeError):
        return None


class CustomerClient(ServiceClient, CustomerLookup):

    async def find_customer_by_id(self, customer_id: str) -> CustomerResponse | None:
        segment = path_segment(customer_id)
        if segment is None:
            return None
        status, body = await self._request('GET', f"/{segment}")
        if status == 404:
            return None
        if status != 200:
            raise RemoteServiceError(f"Customer service answered {status}")
        try:
            customer = msgspec.json.decode(body, type=CustomerResponse)
        except msgspec.DecodeError as e:
            raise RemoteServiceError(f"Unreadable customer {customer_id}: {e}") from e
        if customer.id != customer_id:
            logging.warning(f"Customer service answered customer {customer.id} for {customer_id}")
            return None
        return customer


class ProductClient(ServiceClient, InventoryReservation):

    async def purchase_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        status, body = await self._request('POST', '/purchase', requests)
        if status == 200:
            try:
                return msgspec.json.decode(body, type=list[PurchaseResult])
            except msgspec.DecodeError as e:
                # the products are reserved at this point
                await self._release_unconfirmed(requests)
                raise RemoteServiceError(f"Unreadable purchase results: {e}") from e
        if status == 404:
            raise ProductsNotFoundError()
        if error_code(body) == InsufficientStockError.__name__:
            raise InsufficientStockError(msgspec.json.decode(body)['product_id'])
        raise RemoteServiceError(
            f"An error occurred while processing the products purchase: {status}"
        )

    async def release_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        status, body = await self._request('POST', '/release', requests)
        if status != 200:
            raise RemoteServiceError(f"An error occurred while releasing the products: {status}")
        try:
            return msgspec.json.decode(body, type=list[PurchaseResult])
        except msgspec.DecodeError as e:
            raise RemoteServiceError(f"Unreadable release results: {e}") from e

    async def _release_unconfirmed(self, requests: list[PurchaseRequest]):
        try:
            await self.release_products(requests)
        except Exception:
            logging.exception(f"Could not release products {[r.product_id for r in requests]}")


class PaymentClient(ServiceClient, PaymentInitiator):

    async def request_order_payment(self, request: PaymentRequest) -> int:
        try:
            status, body = await self._request('POST', '', request)
        except RemoteServiceError as e:
            raise PaymentFailedError(e.message) from e
        if status not in (200, 201):
            logging.warning(f"Payment for order {request.order_reference} rejected: {status} {body!r}")
            raise PaymentFailedError(f"Payment for order {request.order_reference} failed with status {status}")
        try:
            return msgspec.json.decode(body)['payment_id']
        except (msgspec.DecodeError, KeyError, TypeError) as e:
            raise PaymentFailedError(f"Unreadable payment for order {request.order_reference}") from e

from abc import ABC, abstractmethod

from common.models import CustomerResponse, OrderConfirmation, PaymentRequest, PurchaseRequest, PurchaseResult

# Collaborators of the order orchestrator


class CustomerLookup(ABC):

    @abstractmethod
    async def find_customer_by_id(self, customer_id: str) -> CustomerResponse | None:
        pass


class InventoryReservation(ABC):

    @abstractmethod
    async def purchase_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        pass

    @abstractmethod
    async def release_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        pass


class PaymentInitiator(ABC):

    @abstractmethod
    async def request_order_payment(self, request: PaymentRequest) -> int:
        """Returns the payment transaction id."""


class ConfirmationPublisher(ABC):

    @abstractmethod
    async def send_order_confirmation(self, confirmation: OrderConfirmation):
        pass

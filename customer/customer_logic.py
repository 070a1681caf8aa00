import uuid
from typing import Annotated

from msgspec import Meta, Struct

from common.errors import CustomerNotFoundError, InvalidRequestError
from common.models import Address, CustomerResponse
from customer.repository import Customer, CustomerRepository

Email = Annotated[str, Meta(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]


class CustomerRequest(Struct, kw_only=True):
    id: str | None = None
    firstname: str
    lastname: str
    email: Email
    address: Address | None = None


def to_response(customer: Customer) -> CustomerResponse:
    return CustomerResponse(
        id=customer.id,
        firstname=customer.firstname,
        lastname=customer.lastname,
        email=customer.email,
        address=customer.address,
    )


class CustomerLogic:
    def __init__(self, logger, repository: CustomerRepository):
        self.logger = logger
        self.repository = repository

    async def create_customer(self, request: CustomerRequest) -> str:
        customer = await self.repository.save(Customer(
            id=str(uuid.uuid4()),
            firstname=request.firstname,
            lastname=request.lastname,
            email=request.email,
            address=request.address,
        ))
        self.logger.debug(f"Customer: {customer.id} created")
        return customer.id

    async def update_customer(self, request: CustomerRequest):
        if not request.id:
            raise InvalidRequestError("Cannot update customer:: No customer ID provided")
        customer = await self.repository.find_by_id(request.id)
        if customer is None:
            raise CustomerNotFoundError(
                f"Cannot update customer:: No customer found with the provided ID: {request.id}"
            )
        # blank fields keep their stored value
        if request.firstname.strip():
            customer.firstname = request.firstname
        if request.lastname.strip():
            customer.lastname = request.lastname
        customer.email = request.email
        if request.address is not None:
            customer.address = request.address
        await self.repository.save(customer)

    async def find_all_customers(self) -> list[CustomerResponse]:
        return [to_response(customer) for customer in await self.repository.find_all()]

    async def find_by_id(self, customer_id: str) -> CustomerResponse:
        customer = await self.repository.find_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(f"No customer found with the provided ID: {customer_id}")
        return to_response(customer)

    async def exists_by_id(self, customer_id: str) -> bool:
        return await self.repository.find_by_id(customer_id) is not None

    async def delete_customer(self, customer_id: str):
        await self.repository.delete(customer_id)

"""
Customer Command Handlers

Commands:
- CreateCustomerCommand: Register a customer
- BlockCustomerCommand: Prevent a customer from making new reservations
"""

from dataclasses import dataclass

import structlog

from shared.application.clock import Clock, SystemClock
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import AlreadyExistsError
from shared.domain.identifiers import require_id, resolve_id
from apps.customers.domain.entities import Customer
from apps.customers.domain.errors import CustomerNotFoundError
from apps.customers.repositories import CustomerRepository

logger = structlog.get_logger(__name__)


@dataclass
class CreateCustomerCommand:
    first_name: str
    last_name: str
    email: str
    id: object = None


@dataclass
class BlockCustomerCommand:
    customer_id: object


class CreateCustomerHandler:

    def __init__(self, customer_repo: CustomerRepository, clock: Clock):
        self.customer_repo = customer_repo
        self.clock = clock

    def handle(self, command: CreateCustomerCommand) -> Customer:
        customer = Customer.create(
            first_name=command.first_name,
            last_name=command.last_name,
            email=command.email,
            created_at=self.clock.now(),
            id=resolve_id(command.id),
        )

        with DjangoUnitOfWork() as uow:
            if self.customer_repo.exists(customer.id):
                raise AlreadyExistsError(f"Customer {customer.id} already exists", code='customer_exists')
            if self.customer_repo.exists_email(customer.email):
                raise AlreadyExistsError(
                    f"Email {customer.email} is already registered", code='email_exists'
                )

            uow.register(self.customer_repo, customer)
            rows = uow.commit("Customer created")

        logger.info("customer.created", customer_id=str(customer.id), rows=rows)
        return customer


class BlockCustomerHandler:
    """Handler for BlockCustomer command; a second block is rejected"""

    def __init__(self, customer_repo: CustomerRepository, clock: Clock):
        self.customer_repo = customer_repo
        self.clock = clock

    def handle(self, command: BlockCustomerCommand) -> Customer:
        customer_id = require_id(command.customer_id)

        with DjangoUnitOfWork() as uow:
            customer = self.customer_repo.get_by_id(customer_id, lock=True)
            if not customer:
                raise CustomerNotFoundError(f"Customer {customer_id} not found")

            customer.block(self.clock.now())

            uow.register(self.customer_repo, customer)
            rows = uow.commit("Customer blocked")

        logger.info("customer.blocked", customer_id=str(customer_id), rows=rows)
        return customer


def register_handlers(bus, clock: Clock | None = None):
    clock = clock or SystemClock()
    customer_repo = CustomerRepository()

    bus.register_command_handler(
        CreateCustomerCommand, CreateCustomerHandler(customer_repo, clock).handle
    )
    bus.register_command_handler(
        BlockCustomerCommand, BlockCustomerHandler(customer_repo, clock).handle
    )

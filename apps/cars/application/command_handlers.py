"""
Fleet Command Handlers

Commands:
- CreateCarCommand: Register a car in the fleet
- SendCarToMaintenanceCommand: Take an available car off the road
- ReturnCarFromMaintenanceCommand: Put a serviced car back in the fleet
- RetireCarCommand: Permanently remove a car from service
"""

from dataclasses import dataclass

import structlog

from shared.application.clock import Clock, SystemClock
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import AlreadyExistsError
from shared.domain.identifiers import require_id, resolve_id
from apps.cars.domain.entities import Car
from apps.cars.domain.errors import CarNotFoundError, LicensePlateAlreadyExistsError
from apps.cars.repositories import CarRepository

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class CreateCarCommand:
    manufacturer: str
    model: str
    license_plate: str
    category: str
    id: object = None


@dataclass
class SendCarToMaintenanceCommand:
    car_id: object


@dataclass
class ReturnCarFromMaintenanceCommand:
    car_id: object


@dataclass
class RetireCarCommand:
    car_id: object


# ===== Command Handlers =====

class CreateCarHandler:
    """
    Handler for CreateCar command

    Rejects a duplicate id or license plate with AlreadyExistsError. The
    unique index on the plate backs the check up at commit time.
    """

    def __init__(self, car_repo: CarRepository, clock: Clock):
        self.car_repo = car_repo
        self.clock = clock

    def handle(self, command: CreateCarCommand) -> Car:
        car = Car.create(
            manufacturer=command.manufacturer,
            model=command.model,
            license_plate=command.license_plate,
            category=command.category,
            created_at=self.clock.now(),
            id=resolve_id(command.id),
        )

        with DjangoUnitOfWork() as uow:
            if self.car_repo.exists(car.id):
                logger.warning("car.create.rejected", car_id=str(car.id), code='car_exists')
                raise AlreadyExistsError(f"Car {car.id} already exists", code='car_exists')
            if self.car_repo.exists_license_plate(car.license_plate):
                logger.warning(
                    "car.create.rejected",
                    license_plate=car.license_plate,
                    code=LicensePlateAlreadyExistsError.code,
                )
                raise LicensePlateAlreadyExistsError(
                    f"License plate {car.license_plate} is already registered"
                )

            uow.register(self.car_repo, car)
            rows = uow.commit("Car created")

        logger.info("car.created", car_id=str(car.id), license_plate=car.license_plate, rows=rows)
        return car


class _CarTransitionHandler:
    """Load a car with a lock, run one status transition, commit once."""

    transition = ''
    label = ''

    def __init__(self, car_repo: CarRepository):
        self.car_repo = car_repo

    def handle(self, command) -> Car:
        car_id = require_id(command.car_id)

        with DjangoUnitOfWork() as uow:
            car = self.car_repo.get_by_id(car_id, lock=True)
            if not car:
                raise CarNotFoundError(f"Car {car_id} not found")

            try:
                getattr(car, self.transition)()
            except ValueError as exc:
                logger.warning(
                    "car.transition.rejected",
                    car_id=str(car_id),
                    transition=self.transition,
                    status=car.status.value,
                    error=str(exc),
                )
                raise

            uow.register(self.car_repo, car)
            rows = uow.commit(self.label)

        logger.info("car.transition", car_id=str(car_id), status=car.status.value, rows=rows)
        return car


class SendCarToMaintenanceHandler(_CarTransitionHandler):
    transition = 'send_to_maintenance'
    label = 'Car sent to maintenance'


class ReturnCarFromMaintenanceHandler(_CarTransitionHandler):
    transition = 'return_from_maintenance'
    label = 'Car returned from maintenance'


class RetireCarHandler(_CarTransitionHandler):
    transition = 'retire'
    label = 'Car retired'


def register_handlers(bus, clock: Clock | None = None):
    """Wire the fleet commands into a message bus."""
    clock = clock or SystemClock()
    car_repo = CarRepository()

    bus.register_command_handler(CreateCarCommand, CreateCarHandler(car_repo, clock).handle)
    bus.register_command_handler(
        SendCarToMaintenanceCommand, SendCarToMaintenanceHandler(car_repo).handle
    )
    bus.register_command_handler(
        ReturnCarFromMaintenanceCommand, ReturnCarFromMaintenanceHandler(car_repo).handle
    )
    bus.register_command_handler(RetireCarCommand, RetireCarHandler(car_repo).handle)

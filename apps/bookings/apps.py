from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"
    verbose_name = _("Bookings")

    def ready(self) -> None:
        from shared.application.audit import register_audit
        from shared.application.message_bus import message_bus
        from apps.bookings.application.command_handlers import CreateReservationCommand, register_handlers
        from apps.bookings.domain import events

        if not message_bus.has_command_handler(CreateReservationCommand):
            register_handlers(message_bus)
        register_audit(
            message_bus,
            (
                events.ReservationCreated,
                events.ReservationPeriodChanged,
                events.ReservationConfirmed,
                events.ReservationCancelled,
                events.ReservationExpired,
                events.RentalPickedUp,
                events.RentalReturned,
            ),
        )

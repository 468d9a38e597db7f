from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class CarsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cars"
    label = "cars"
    verbose_name = _("Fleet")

    def ready(self) -> None:
        from shared.application.audit import register_audit
        from shared.application.message_bus import message_bus
        from apps.cars.application.command_handlers import CreateCarCommand, register_handlers
        from apps.cars.domain.events import CarRegistered, CarStatusChanged

        if not message_bus.has_command_handler(CreateCarCommand):
            register_handlers(message_bus)
        register_audit(message_bus, (CarRegistered, CarStatusChanged))

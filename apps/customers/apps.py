from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.customers"
    label = "customers"
    verbose_name = _("Customers")

    def ready(self) -> None:
        from shared.application.audit import register_audit
        from shared.application.message_bus import message_bus
        from apps.customers.application.command_handlers import CreateCustomerCommand, register_handlers
        from apps.customers.domain.events import CustomerBlocked, CustomerRegistered

        if not message_bus.has_command_handler(CreateCustomerCommand):
            register_handlers(message_bus)
        register_audit(message_bus, (CustomerRegistered, CustomerBlocked))

from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("customer_id", models.UUIDField(db_index=True)),
                ("car_category", models.CharField(max_length=16)),
                ("period_start", models.DateTimeField()),
                ("period_end", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("expired", "Expired"),
                        ],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField()),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("expired_at", models.DateTimeField(blank=True, null=True)),
                ("rental_id", models.UUIDField(blank=True, null=True, unique=True)),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(period_end__gt=models.F("period_start")),
                        name="reservation_valid_period",
                    ),
                ],
                "indexes": [
                    models.Index(
                        fields=["car_category", "status", "period_start", "period_end"],
                        name="reservation_overlap_idx",
                    ),
                    models.Index(fields=["status", "created_at"], name="reservation_expiry_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Rental",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reservation_id", models.UUIDField(unique=True)),
                ("customer_id", models.UUIDField(db_index=True)),
                ("car_id", models.UUIDField(db_index=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("returned", "Returned")],
                        default="active",
                        max_length=16,
                    ),
                ),
                ("pickup_at", models.DateTimeField()),
                ("fuel_level_out", models.PositiveSmallIntegerField()),
                ("km_out", models.PositiveIntegerField()),
                ("return_at", models.DateTimeField(blank=True, null=True)),
                ("fuel_level_in", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("km_in", models.PositiveIntegerField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Rental",
                "verbose_name_plural": "Rentals",
                "ordering": ["pickup_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(fuel_level_out__lte=100),
                        name="rental_fuel_out_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(fuel_level_in__isnull=True) | models.Q(fuel_level_in__lte=100),
                        name="rental_fuel_in_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(km_in__isnull=True) | models.Q(km_in__gte=models.F("km_out")),
                        name="rental_km_not_decreasing",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["car_id", "status"], name="rental_car_status_idx"),
                ],
            },
        ),
    ]

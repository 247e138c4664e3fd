from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    ROLES = [
        (CUSTOMER, "Customer"),
        (ADMIN, "Administrator"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=15, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=CUSTOMER)

    @property
    def is_administrator(self) -> bool:
        return self.is_superuser or self.role == self.ADMIN

    @property
    def full_name(self) -> str:
        return self.display_name or f"{self.first_name} {self.last_name}".strip()

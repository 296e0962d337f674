"""Cross-module constants.

``Role`` is the identity role carried by every authenticated request.
``RecordStatus`` is the active/inactive flag shared by customers, projects,
users, reference entities and order items.
"""

from django.db import models


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    CLIENT = "CLIENT", "Client"


class RecordStatus(models.IntegerChoices):
    ACTIVE = 1, "Active"
    INACTIVE = 2, "Inactive"

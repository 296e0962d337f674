"""Order domain constants.

Status codes follow the single linear lifecycle
``DRAFT -> SUBMITTED -> PROCESSING -> COMPLETED``.  Only DRAFT orders may be
amended or deleted; advancing the status is not exposed here.
"""

from django.db import models


class OrderStatus(models.IntegerChoices):
    DRAFT = 10, "Draft"
    SUBMITTED = 11, "Submitted"
    PROCESSING = 12, "Processing"
    COMPLETED = 13, "Completed"


EDITABLE_STATUSES: set[int] = {OrderStatus.DRAFT}

ORDER_NUMBER_MAX_RETRIES = 5

NOT_DRAFT_UPDATE = "Only draft orders can be updated"
NOT_DRAFT_DELETE = "Only draft orders can be deleted"
DUPLICATE_MATERIALS = "Duplicate materials are not allowed in the same order"
INVALID_DELIVERY_DATE = "Invalid expected delivery date"
CUSTOMER_REQUIRED = "customer_id: This field is required."

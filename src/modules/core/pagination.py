"""Page-number pagination with ``page`` / ``limit`` query parameters.

Response shape::

    {"<results_key>": [...], "pagination": {"total", "page", "limit", "total_pages"}}

Views pick their own ``results_key`` by subclassing.
"""

from __future__ import annotations

import math
from typing import Any, List

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100
    results_key = "results"

    def __init__(self) -> None:
        self.page_size = settings.REST_FRAMEWORK.get("PAGE_SIZE", 20)

    def get_paginated_response(self, data: List[Any]) -> Response:
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response(
            {
                self.results_key: data,
                "pagination": {
                    "total": total,
                    "page": self.page.number,
                    "limit": limit,
                    "total_pages": math.ceil(total / limit) if limit else 0,
                },
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                self.results_key: schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                    },
                },
            },
        }

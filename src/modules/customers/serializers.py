"""Customer DRF serializers for API output.

Input is parsed into the Pydantic DTOs in ``dtos.py``; these serializers
only render the aggregate.  Password hashes are never exposed.
"""

from __future__ import annotations

from typing import List

from rest_framework import serializers

from modules.customers.models import Customer, Project, User


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ["id", "lookup_code", "name", "description", "is_default", "status"]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "lookup_code", "email", "role", "status"]
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    """Customer aggregate: scalars plus projects, users and warehouse ids."""

    projects = ProjectSerializer(many=True, read_only=True)
    users = UserSerializer(many=True, read_only=True)
    warehouse_ids = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            "id",
            "lookup_code",
            "name",
            "address",
            "city",
            "state",
            "zip_code",
            "phone",
            "email",
            "status",
            "version",
            "projects",
            "users",
            "warehouse_ids",
            "created_at",
            "created_by",
            "modified_at",
            "modified_by",
        ]
        read_only_fields = fields

    def get_warehouse_ids(self, obj: Customer) -> List[int]:
        return [a.warehouse_id for a in obj.warehouse_assignments.all()]

"""Unit tests for TenantJWTAuthentication and TenantTokenUser."""

import pytest
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.tokens import AccessToken

from modules.core.authentication import TenantJWTAuthentication, TenantTokenUser
from modules.core.constants import RecordStatus, Role

pytestmark = pytest.mark.unit


def _validated_token(**claims):
    token = AccessToken()
    for key, value in claims.items():
        token[key] = value
    return TenantJWTAuthentication().get_validated_token(str(token))


class TestTenantTokenUser:
    def test_claims_exposed_as_attributes(self):
        user = TenantTokenUser({"user_id": 4, "role": "CLIENT", "customer_id": 12})
        assert user.id == 4
        assert user.role == Role.CLIENT
        assert user.customer_id == 12
        assert user.status == RecordStatus.ACTIVE
        assert user.is_authenticated
        assert not user.is_staff

    def test_admin_is_staff(self):
        user = TenantTokenUser({"user_id": 1, "role": "ADMIN"})
        assert user.is_staff
        assert user.customer_id is None
        assert str(user) == "ADMIN:1"


class TestTenantJWTAuthentication:
    def test_admin_token_accepted(self):
        token = _validated_token(user_id=1, role="ADMIN")
        user = TenantJWTAuthentication().get_user(token)
        assert user.role == Role.ADMIN

    def test_client_token_accepted(self):
        token = _validated_token(user_id=2, role="CLIENT", customer_id=5)
        user = TenantJWTAuthentication().get_user(token)
        assert user.customer_id == 5

    def test_unknown_role_rejected(self):
        token = _validated_token(user_id=1, role="SUPERUSER")
        with pytest.raises(AuthenticationFailed):
            TenantJWTAuthentication().get_user(token)

    def test_missing_role_rejected(self):
        token = _validated_token(user_id=1)
        with pytest.raises(AuthenticationFailed):
            TenantJWTAuthentication().get_user(token)

    def test_client_without_customer_rejected(self):
        token = _validated_token(user_id=2, role="CLIENT")
        with pytest.raises(AuthenticationFailed):
            TenantJWTAuthentication().get_user(token)

    def test_inactive_user_forbidden(self):
        token = _validated_token(
            user_id=2, role="CLIENT", customer_id=5, status=int(RecordStatus.INACTIVE)
        )
        with pytest.raises(PermissionDenied):
            TenantJWTAuthentication().get_user(token)

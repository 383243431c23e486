import uuid

import pytest

from usermgmt.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from usermgmt.core.security import decode_access_token
from usermgmt.models.user import User
from usermgmt.services.user_service import UserService
from usermgmt.types import LoginRequest, UserRequest, UserResponse


def test_create_returns_view_without_password(service, alice_request):
    view = service.create(alice_request)

    assert isinstance(view, UserResponse)
    assert isinstance(view.id, uuid.UUID)
    assert view.username == "alice"
    assert view.created_by == view.id
    assert view.access_token == ""
    dumped = view.model_dump()
    assert "password" not in dumped
    assert "secret1" not in dumped.values()


def test_create_stores_a_verifiable_hash(service, repository, hasher, alice_request):
    service.create(alice_request)

    stored = repository.resolve_by_username("alice")

    assert stored.password != "secret1"
    assert hasher.verify("secret1", stored.password)


def test_create_with_acting_principal(service, alice_request):
    admin_id = uuid.uuid4()

    view = service.create(alice_request, created_by=admin_id)

    assert view.created_by == admin_id


def test_create_rejects_missing_field(service, db, alice_request):
    request = alice_request.model_copy(update={"role": ""})

    with pytest.raises(ValidationError):
        service.create(request)

    assert db.query(User).count() == 0


def test_login_with_correct_password_returns_token(service, alice_request):
    created = service.create(alice_request)

    result = service.login(LoginRequest(username="alice", password="secret1"))

    assert result.access_token
    assert result.token_type == "bearer"
    payload = decode_access_token(result.access_token)
    assert payload["sub"] == "alice"
    assert payload["uid"] == str(created.id)
    assert payload["role"] == "member"


def test_login_with_wrong_password_is_unauthorized(service, alice_request):
    service.create(alice_request)

    with pytest.raises(UnauthorizedError):
        service.login(LoginRequest(username="alice", password="wrong"))


def test_login_unknown_username_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.login(LoginRequest(username="nobody", password="secret1"))


def test_login_after_delete_is_unauthorized(service, alice_request):
    service.create(alice_request)
    service.delete("alice")

    with pytest.raises(UnauthorizedError):
        service.login(LoginRequest(username="alice", password="secret1"))


def test_login_uses_injected_token_issuer(repository, hasher, alice_request):
    issued = []

    def issuer(claims: dict) -> str:
        issued.append(claims)
        return "token-123"

    service = UserService(repository, hasher, token_issuer=issuer)
    service.create(alice_request)

    assert service.login(LoginRequest(username="alice", password="secret1")).access_token == "token-123"
    assert issued[0]["sub"] == "alice"


def test_resolve_by_username(service, alice_request):
    created = service.create(alice_request)

    view = service.resolve_by_username("alice")

    assert view.id == created.id
    assert view.email == "a@x.com"


def test_resolve_unknown_username_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.resolve_by_username("nobody")


def test_update_email_is_visible_on_resolve(service, alice_request):
    created = service.create(alice_request)
    request = alice_request.model_copy(update={"email": "a2@x.com"})

    service.update("alice", request)
    view = service.resolve_by_username("alice")

    assert view.email == "a2@x.com"
    assert view.updated_at is not None
    assert view.updated_by == created.id


def test_update_keeps_password_usable(service, alice_request):
    service.create(alice_request)

    service.update("alice", alice_request.model_copy(update={"name": "Alice B"}))

    assert service.login(LoginRequest(username="alice", password="secret1")).access_token


def test_update_unknown_username_is_not_found(service, alice_request):
    with pytest.raises(NotFoundError):
        service.update("nobody", alice_request)


def test_update_rejects_empty_field(service, alice_request):
    service.create(alice_request)

    with pytest.raises(ValidationError):
        service.update("alice", UserRequest(username="alice", email="", name="Alice",
                                            password="secret1", role="member"))

    assert service.resolve_by_username("alice").email == "a@x.com"


def test_delete_sets_deletion_fields(service, alice_request):
    created = service.create(alice_request)

    view = service.delete("alice")

    assert view.deleted_at is not None
    assert view.deleted_by == created.id
    # Still resolvable: soft-deleted rows are not filtered out
    assert service.resolve_by_username("alice").deleted_at is not None


def test_update_after_delete_conflicts(service, alice_request):
    service.create(alice_request)
    deleted = service.delete("alice")

    with pytest.raises(ConflictError):
        service.update("alice", alice_request.model_copy(update={"email": "z@x.com"}))

    view = service.resolve_by_username("alice")
    assert view.email == "a@x.com"
    assert view.updated_at == deleted.updated_at


def test_password_with_nul_byte_can_log_in(service, alice_request):
    service.create(alice_request.model_copy(update={"password": "se\u0000cret"}))

    assert service.login(LoginRequest(username="alice", password="se\u0000cret")).access_token
    with pytest.raises(UnauthorizedError):
        service.login(LoginRequest(username="alice", password="se"))


def test_view_timestamps_serialize_as_utc(service, alice_request):
    service.create(alice_request)
    service.update("alice", alice_request.model_copy(update={"email": "a2@x.com"}))

    dumped = service.resolve_by_username("alice").model_dump(mode="json")

    assert dumped["created_at"].endswith("+00:00")
    assert dumped["updated_at"].endswith("+00:00")
    assert dumped["deleted_at"] is None

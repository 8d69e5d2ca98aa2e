from datetime import datetime, timedelta, timezone
import uuid

import pytest
import pytest_asyncio

from app.core.errors import ForbiddenError, NotFoundError, PasswordRequiredError, ShareExpiredError
from app.db.repositories.share_repository import DocumentShareRepository
from app.domains.documents.entities import ChangeType
from app.domains.documents.schemas import DocumentCreate
from app.domains.documents.services import DocumentService, DocumentVersionService
from app.domains.sharing.entities import SharePermission
from app.domains.sharing.schemas import ShareCreate, ShareUpdate
from app.domains.sharing.services import ShareRegistry, build_share_url


@pytest_asyncio.fixture
async def document(session, owner):
    return await DocumentService(session).create_document(
        DocumentCreate(title="NDA", content="v1", status="DRAFT"), owner
    )


@pytest.mark.asyncio
async def test_token_is_long_and_unique(session, owner, document):
    registry = ShareRegistry(session)
    first = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)
    second = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)

    assert len(first.access_token) == 64
    assert first.access_token != second.access_token
    assert first.permission == SharePermission.VIEW
    assert build_share_url(first.access_token).endswith(f"/share/{first.access_token}")


@pytest.mark.asyncio
async def test_view_count_increments(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(permission="VIEW", expires_at=datetime.utcnow() + timedelta(hours=1)),
        owner.user_id
    )
    assert share.view_count == 0

    first = await registry.resolve_share(share.access_token)
    second = await registry.resolve_share(share.access_token)

    assert first["view_count"] == 1
    assert second["view_count"] == 2
    assert second["document"]["content"] == "v1"
    assert second["permission"] == SharePermission.VIEW

    stored = await registry.get_share(document.uuid, share.uuid)
    assert stored.view_count == 2
    assert stored.last_viewed_at is not None


@pytest.mark.asyncio
async def test_password_protected_share(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(password="secret"), owner.user_id)

    assert share.password_hash != "secret"

    with pytest.raises(PasswordRequiredError) as missing:
        await registry.resolve_share(share.access_token)
    assert missing.value.to_dict()["requires_password"] is True

    with pytest.raises(PasswordRequiredError):
        await registry.resolve_share(share.access_token, "wrong")

    result = await registry.resolve_share(share.access_token, "secret")
    assert result["view_count"] == 1


@pytest.mark.asyncio
async def test_share_without_password_ignores_supplied_password(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)

    result = await registry.resolve_share(share.access_token, "anything")
    assert result["share_id"] == share.uuid


@pytest.mark.asyncio
async def test_expired_share_wins_over_correct_password(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(password="secret", expires_at=datetime.utcnow() - timedelta(minutes=1)),
        owner.user_id
    )

    with pytest.raises(ShareExpiredError):
        await registry.resolve_share(share.access_token, "secret")

    # Просроченная ссылка не удаляется и не засчитывает просмотр
    stored = await registry.get_share(document.uuid, share.uuid)
    assert stored.view_count == 0


@pytest.mark.asyncio
async def test_timezone_aware_expiry_is_normalized(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(expires_at=datetime.now(timezone.utc) - timedelta(seconds=5)),
        owner.user_id
    )

    assert share.expires_at.tzinfo is None
    with pytest.raises(ShareExpiredError):
        await registry.resolve_share(share.access_token)


@pytest.mark.asyncio
async def test_unknown_token_is_not_found(session):
    with pytest.raises(NotFoundError):
        await ShareRegistry(session).resolve_share("0" * 64)


@pytest.mark.asyncio
async def test_revoked_share_is_not_found(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)
    await registry.resolve_share(share.access_token)

    await registry.revoke_share(document.uuid, share.uuid)

    for _ in range(2):
        with pytest.raises(NotFoundError):
            await registry.resolve_share(share.access_token)
    with pytest.raises(NotFoundError):
        await registry.revoke_share(document.uuid, share.uuid)


@pytest.mark.asyncio
async def test_partial_update_keeps_omitted_fields(session, owner, document):
    registry = ShareRegistry(session)
    expires_at = datetime.utcnow() + timedelta(days=1)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(permission="COMMENT", expires_at=expires_at, password="secret", message="Please review"),
        owner.user_id
    )

    updated = await registry.update_share(document.uuid, share.uuid, ShareUpdate(permission="EDIT"))

    assert updated.permission == SharePermission.EDIT
    assert updated.expires_at == expires_at
    assert updated.has_password
    assert updated.message == "Please review"


@pytest.mark.asyncio
async def test_update_can_clear_password_and_expiry(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(password="secret", expires_at=datetime.utcnow() - timedelta(hours=1)),
        owner.user_id
    )

    updated = await registry.update_share(
        document.uuid, share.uuid, ShareUpdate(password=None, expires_at=None)
    )

    assert not updated.has_password
    assert updated.expires_at is None
    result = await registry.resolve_share(share.access_token)
    assert result["view_count"] == 1


@pytest.mark.asyncio
async def test_update_share_of_other_document_is_not_found(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)

    with pytest.raises(NotFoundError):
        await registry.update_share(uuid.uuid4(), share.uuid, ShareUpdate(permission="EDIT"))


@pytest.mark.asyncio
async def test_edit_share_creates_version(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(permission="EDIT"), owner.user_id)

    edited = await registry.edit_shared_document(share.access_token, "external v2")

    assert edited.content == "external v2"
    versions = await DocumentVersionService(session).list_versions(document.uuid, owner)
    assert versions[0].version_number == 2
    assert versions[0].change_type == ChangeType.CONTENT
    assert versions[0].user_id == f"share:{share.uuid}"
    assert versions[0].user_name == "External editor"


@pytest.mark.asyncio
async def test_view_share_cannot_edit(session, owner, document):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(permission="COMMENT"), owner.user_id)

    with pytest.raises(ForbiddenError):
        await registry.edit_shared_document(share.access_token, "nope")


@pytest.mark.asyncio
async def test_list_shares_newest_first(session, owner, document):
    registry = ShareRegistry(session)
    first = await registry.create_share(document.uuid, ShareCreate(message="first"), owner.user_id)
    second = await registry.create_share(document.uuid, ShareCreate(message="second"), owner.user_id)

    shares = await registry.list_shares(document.uuid)
    assert [s.uuid for s in shares] == [second.uuid, first.uuid]


@pytest.mark.asyncio
async def test_share_revoked_while_opening_is_not_found(session, owner, document, monkeypatch):
    registry = ShareRegistry(session)
    share = await registry.create_share(document.uuid, ShareCreate(), owner.user_id)

    original = DocumentShareRepository.register_view

    async def revoke_then_view(self, share_uuid, viewed_at):
        await self.delete(share_uuid)
        return await original(self, share_uuid, viewed_at)

    monkeypatch.setattr(DocumentShareRepository, "register_view", revoke_then_view)

    with pytest.raises(NotFoundError):
        await registry.resolve_share(share.access_token)


@pytest.mark.asyncio
async def test_share_expired_while_opening_counts_no_view(session, owner, document, monkeypatch):
    registry = ShareRegistry(session)
    share = await registry.create_share(
        document.uuid,
        ShareCreate(expires_at=datetime.utcnow() + timedelta(hours=1)),
        owner.user_id
    )

    original = DocumentShareRepository.register_view

    async def expire_then_view(self, share_uuid, viewed_at):
        await self.update_fields(share_uuid, {"expires_at": viewed_at - timedelta(minutes=1)})
        return await original(self, share_uuid, viewed_at)

    monkeypatch.setattr(DocumentShareRepository, "register_view", expire_then_view)

    with pytest.raises(ShareExpiredError):
        await registry.resolve_share(share.access_token)

    monkeypatch.undo()
    stored = await registry.get_share(document.uuid, share.uuid)
    assert stored.view_count == 0
    assert stored.expires_at > datetime.utcnow()

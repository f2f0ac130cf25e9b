"""Asset registry service: upload, replace, delete and reference counting."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.permissions import can_manage
from inkpost.auth.principal import Principal
from inkpost.db.models.asset import Asset, AssetRefKind, AssetStatus
from inkpost.lib.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ObjectNotFoundError,
    ProviderError,
)
from inkpost.lib.hooks import (
    AFTER_ASSET_DELETE,
    AFTER_ASSET_REPLACE,
    AFTER_ASSET_UPLOAD,
    ASSET_UPLOAD_FOLDER,
    hooks,
)
from inkpost.lib.media_url import extract_storage_key
from inkpost.lib.storage.base import ObjectStore, UploadResult

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "inkpost/assets"

_LIVE_STATUSES = (AssetStatus.ACTIVE, AssetStatus.ORPHANED)


@dataclass(frozen=True)
class AssetUsage:
    """One place an asset is embedded, e.g. a post's cover image."""

    kind: AssetRefKind
    ref_id: str
    field: str

    def as_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["kind"] = str(self.kind)
        data["ref_id"] = str(self.ref_id)
        return data


def _now() -> datetime:
    return datetime.now(UTC)


def validate_image_payload(data: bytes, mime_type: str | None, max_size: int | None = None) -> None:
    """Reject empty, oversized or non-image uploads."""
    if not data:
        raise BadRequestError("Uploaded file is empty")
    if not mime_type or not mime_type.startswith("image/"):
        raise BadRequestError("Only image uploads are allowed")
    if max_size is not None and len(data) > max_size:
        raise BadRequestError(f"File size {len(data)} exceeds limit {max_size}")


def ensure_unreferenced(asset: Asset) -> None:
    """Raise ``ConflictError`` while anything still embeds the asset."""
    if asset.ref_count > 0:
        raise ConflictError(f"Asset is still used in {asset.ref_count} place(s). Detach first.")


async def get_asset_by_id(db_session: AsyncSession, asset_id: UUID) -> Asset | None:
    result = await db_session.execute(select(Asset).where(Asset.id == asset_id))
    return result.scalar_one_or_none()


async def get_asset_by_key(db_session: AsyncSession, provider: str, key: str) -> Asset | None:
    result = await db_session.execute(
        select(Asset).where(Asset.provider == provider, Asset.key == key)
    )
    return result.scalar_one_or_none()


async def _require_asset(db_session: AsyncSession, asset_id: UUID) -> Asset:
    asset = await get_asset_by_id(db_session, asset_id)
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


async def _upload(
    store: ObjectStore,
    data: bytes,
    original_name: str | None,
    owner_id: UUID,
    folder: str,
) -> UploadResult:
    folder = await hooks.apply_filters(ASSET_UPLOAD_FOLDER, folder, owner_id=owner_id)
    return await store.upload(data, folder, original_name)


def _apply_upload(asset: Asset, upload: UploadResult, data: bytes, mime_type: str | None, original_name: str | None) -> None:
    asset.key = upload.key
    asset.url = upload.url
    asset.mime_type = mime_type
    asset.size = upload.bytes if upload.bytes is not None else len(data)
    asset.width = upload.width
    asset.height = upload.height
    asset.format = upload.format
    asset.original_name = original_name or upload.original_filename


async def upload_image(
    db_session: AsyncSession,
    store: ObjectStore,
    data: bytes,
    mime_type: str | None,
    original_name: str | None,
    owner_id: UUID,
    folder: str = DEFAULT_FOLDER,
    max_size: int | None = None,
) -> Asset:
    """Upload an image and register it as an unreferenced, active asset.

    The remote object is not removed if the database write fails; the
    orphaned key is logged so it can be cleaned up by hand.
    """
    validate_image_payload(data, mime_type, max_size)

    upload = await _upload(store, data, original_name, owner_id, folder)

    asset = Asset(
        provider=store.provider,
        owner_id=owner_id,
        status=AssetStatus.ACTIVE,
        ref_count=0,
        used_by=[],
    )
    _apply_upload(asset, upload, data, mime_type, original_name)

    db_session.add(asset)
    try:
        await db_session.commit()
    except SQLAlchemyError:
        await db_session.rollback()
        logger.error(
            "Failed to record uploaded asset; remote object %s/%s is orphaned",
            store.provider,
            upload.key,
        )
        raise
    await db_session.refresh(asset)

    logger.info("Asset %s uploaded as %s/%s", asset.id, asset.provider, asset.key)
    await hooks.do_action(AFTER_ASSET_UPLOAD, asset)
    return asset


async def replace_image(
    db_session: AsyncSession,
    store: ObjectStore,
    asset_id: UUID,
    data: bytes,
    mime_type: str | None,
    original_name: str | None,
    principal: Principal,
    folder: str = DEFAULT_FOLDER,
    max_size: int | None = None,
) -> Asset:
    """Swap the stored image behind an asset, keeping its id and references.

    Upload happens first so a failed upload leaves the record untouched.
    The previous remote object is destroyed only after the new one is
    committed; failures there are logged and swallowed.
    """
    asset = await _require_asset(db_session, asset_id)
    if not can_manage(principal, asset.owner_id):
        raise ForbiddenError("You do not have permission to replace this asset")
    validate_image_payload(data, mime_type, max_size)

    upload = await _upload(store, data, original_name, asset.owner_id, folder)

    old_key = asset.key
    old_provider = asset.provider
    old_object_exists = asset.status != AssetStatus.DELETED

    _apply_upload(asset, upload, data, mime_type, original_name)
    asset.provider = store.provider
    asset.status = AssetStatus.ACTIVE
    asset.deleted_at = None
    asset.orphaned_at = None
    try:
        await db_session.commit()
    except SQLAlchemyError:
        await db_session.rollback()
        logger.error(
            "Failed to record replacement for asset %s; remote object %s/%s is orphaned",
            asset_id,
            store.provider,
            upload.key,
        )
        raise
    await db_session.refresh(asset)

    logger.info("Asset %s replaced: %s -> %s", asset.id, old_key, asset.key)

    if old_object_exists and old_provider == store.provider and old_key != asset.key:
        try:
            await store.destroy(old_key)
        except ProviderError as exc:
            logger.warning("Failed to destroy replaced object %s/%s: %s", old_provider, old_key, exc)

    await hooks.do_action(AFTER_ASSET_REPLACE, asset, old_key=old_key)
    return asset


async def _delete(
    db_session: AsyncSession,
    store: ObjectStore,
    asset: Asset,
    principal: Principal,
) -> Asset:
    if asset.status == AssetStatus.DELETED:
        raise NotFoundError("Asset not found")
    if not can_manage(principal, asset.owner_id):
        raise ForbiddenError("You do not have permission to delete this asset")

    # pending_delete means an earlier destroy failed; go straight to the retry
    if asset.status != AssetStatus.PENDING_DELETE:
        ensure_unreferenced(asset)
        result = await db_session.execute(
            update(Asset)
            .where(
                Asset.id == asset.id,
                Asset.ref_count == 0,
                Asset.status.in_(_LIVE_STATUSES),
            )
            .values(status=AssetStatus.PENDING_DELETE, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db_session.rollback()
            await db_session.refresh(asset)
            ensure_unreferenced(asset)
            raise ConflictError("Asset changed while it was being deleted. Try again.")
        await db_session.commit()
        await db_session.refresh(asset)

    try:
        await store.destroy(asset.key)
    except ObjectNotFoundError:
        logger.info("Remote object %s already gone; finishing delete of asset %s", asset.key, asset.id)
    except ProviderError as exc:
        logger.error("Asset %s stuck in pending_delete: %s", asset.id, exc)
        raise

    asset.status = AssetStatus.DELETED
    asset.deleted_at = _now()
    await db_session.commit()
    await db_session.refresh(asset)

    logger.info("Asset %s deleted (%s/%s)", asset.id, asset.provider, asset.key)
    await hooks.do_action(AFTER_ASSET_DELETE, asset)
    return asset


async def delete_asset(
    db_session: AsyncSession,
    store: ObjectStore,
    asset_id: UUID,
    principal: Principal,
) -> Asset:
    """Delete an unreferenced asset: mark pending_delete, destroy remotely, mark deleted.

    Calling this again on an asset left in ``pending_delete`` retries the
    remote destroy. A remote object that is already gone counts as destroyed.
    """
    asset = await _require_asset(db_session, asset_id)
    return await _delete(db_session, store, asset, principal)


async def delete_asset_by_url(
    db_session: AsyncSession,
    store: ObjectStore,
    url: str,
    principal: Principal,
) -> Asset:
    """Delete the asset whose public URL is ``url``."""
    key = extract_storage_key(url)
    if key is None:
        raise BadRequestError("Could not extract a storage key from the URL")

    asset = await get_asset_by_key(db_session, store.provider, key)
    if asset is None:
        raise NotFoundError("Asset not found")
    return await _delete(db_session, store, asset, principal)


async def attach_asset(
    db_session: AsyncSession,
    asset_id: UUID,
    usage: AssetUsage,
    commit: bool = True,
) -> Asset:
    """Record that ``usage`` embeds the asset and bump its reference count."""
    result = await db_session.execute(
        update(Asset)
        .where(Asset.id == asset_id, Asset.status.in_(_LIVE_STATUSES))
        .values(
            ref_count=Asset.ref_count + 1,
            status=AssetStatus.ACTIVE,
            orphaned_at=None,
            updated_at=_now(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        asset = await get_asset_by_id(db_session, asset_id)
        if asset is None:
            raise NotFoundError("Asset not found")
        raise ConflictError("Asset is being deleted and cannot be attached")

    asset = await _require_asset(db_session, asset_id)
    await db_session.refresh(asset)
    asset.used_by = [*asset.used_by, usage.as_dict()]

    if commit:
        await db_session.commit()
        await db_session.refresh(asset)
    else:
        await db_session.flush()
    return asset


async def detach_asset(
    db_session: AsyncSession,
    asset_id: UUID,
    usage: AssetUsage,
    commit: bool = True,
) -> Asset:
    """Drop one reference; an asset nobody embeds any more becomes orphaned."""
    await db_session.execute(
        update(Asset)
        .where(Asset.id == asset_id, Asset.ref_count > 0)
        .values(ref_count=Asset.ref_count - 1, updated_at=_now())
        .execution_options(synchronize_session=False)
    )

    asset = await _require_asset(db_session, asset_id)
    await db_session.refresh(asset)

    entry = usage.as_dict()
    used_by = list(asset.used_by)
    if entry in used_by:
        used_by.remove(entry)
        asset.used_by = used_by

    if asset.ref_count == 0 and asset.status == AssetStatus.ACTIVE:
        asset.status = AssetStatus.ORPHANED
        asset.orphaned_at = _now()

    if commit:
        await db_session.commit()
        await db_session.refresh(asset)
    else:
        await db_session.flush()
    return asset


async def swap_reference(
    db_session: AsyncSession,
    current_id: UUID | None,
    new_id: UUID | None,
    usage: AssetUsage,
) -> Asset | None:
    """Move ``usage`` from ``current_id`` to ``new_id`` without committing.

    Either side may be None. Returns the newly attached asset, if any.
    """
    if current_id == new_id:
        return None

    attached = None
    if new_id is not None:
        attached = await attach_asset(db_session, new_id, usage, commit=False)
    if current_id is not None:
        await detach_asset(db_session, current_id, usage, commit=False)
    return attached


async def list_owner_assets(
    db_session: AsyncSession,
    owner_id: UUID,
    limit: int = 50,
    offset: int = 0,
    include_deleted: bool = False,
) -> list[Asset]:
    """List an owner's assets, newest first."""
    query = select(Asset).where(Asset.owner_id == owner_id)
    if not include_deleted:
        query = query.where(Asset.status != AssetStatus.DELETED)
    query = query.order_by(Asset.created_at.desc(), Asset.id.desc())
    if offset:
        query = query.offset(offset)
    query = query.limit(limit)

    result = await db_session.execute(query)
    return list(result.scalars().all())


async def list_orphaned_assets(
    db_session: AsyncSession,
    older_than: datetime,
    limit: int = 100,
) -> list[Asset]:
    """Orphaned assets unreferenced since before ``older_than``, oldest first."""
    result = await db_session.execute(
        select(Asset)
        .where(
            Asset.status == AssetStatus.ORPHANED,
            Asset.ref_count == 0,
            Asset.orphaned_at < older_than,
        )
        .order_by(Asset.orphaned_at.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_stuck_deletes(db_session: AsyncSession, limit: int = 100) -> list[Asset]:
    """Assets whose remote destroy never completed."""
    result = await db_session.execute(
        select(Asset)
        .where(Asset.status == AssetStatus.PENDING_DELETE)
        .order_by(Asset.updated_at.asc())
        .limit(limit)
    )
    return list(result.scalars().all())

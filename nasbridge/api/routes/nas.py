"""NAS sync endpoints."""

import logging

from fastapi import APIRouter

from nasbridge.api.dependencies import ConfigDep, NasConfigDep, NasSyncEngineDep
from nasbridge.api.models import (
    ConnectionTestResponse,
    DirectoryResponse,
    NasStatusResponse,
    RemoteFilesResponse,
    SyncRequest,
    SyncResponse,
)
from nasbridge.sources.nas import describe_address, select_protocol

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/test", response_model=ConnectionTestResponse)
async def test_connection(nas: NasConfigDep, engine: NasSyncEngineDep):
    """Check that the NAS is reachable with the configured credentials."""
    success = await engine.test_connection(nas)
    return ConnectionTestResponse(success=success, protocol=select_protocol(nas))


@router.post("/sync", response_model=SyncResponse)
async def sync_photos(request: SyncRequest, nas: NasConfigDep, engine: NasSyncEngineDep):
    """Upload a batch of local photos to the NAS.

    Photos are transferred one at a time; failures are reported per photo
    and never abort the batch.
    """
    if request.favorites_only is not None:
        nas = nas.model_copy(update={"sync_favorites_only": request.favorites_only})

    photos = [photo.to_photo() for photo in request.photos]
    logger.info(f"API sync request for {len(photos)} photo(s)")

    result = await engine.sync_to_nas(photos, nas)
    return SyncResponse(**result.as_dict())


@router.get("/status", response_model=NasStatusResponse)
async def get_status(config: ConfigDep, engine: NasSyncEngineDep):
    """Configured target and the time of the last successful sync."""
    nas = config.nas
    return NasStatusResponse(
        configured=nas.is_configured,
        protocol=select_protocol(nas),
        address=describe_address(nas),
        favorites_only=nas.sync_favorites_only,
        last_sync=await engine.get_last_sync_time(),
    )


@router.get("/files", response_model=RemoteFilesResponse)
async def list_files(nas: NasConfigDep, engine: NasSyncEngineDep):
    """List files in the configured remote folder."""
    files = await engine.list_remote_files(nas)
    return RemoteFilesResponse(protocol=select_protocol(nas), files=files)


@router.post("/mkdir", response_model=DirectoryResponse)
async def create_directory(nas: NasConfigDep, engine: NasSyncEngineDep):
    """Create the configured remote folder."""
    return DirectoryResponse(success=await engine.create_remote_directory(nas))

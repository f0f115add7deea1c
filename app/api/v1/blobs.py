import base64
import hashlib
from io import BytesIO
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from app.dependencies.storage import get_storage
from app.logging_config import setup_logging
from app.services.verified_key import decode_key
from app.storage.base import StorageService, content_disposition

router = APIRouter(prefix="/blobs", tags=["blobs"])

logger = setup_logging()


def _not_found(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "success": False,
            "error": "Not Found",
            "message": message,
        },
    )


def _unprocessable(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "success": False,
            "error": "Unprocessable Entity",
            "message": message,
        },
    )


@router.get(
    "/{token}",
    status_code=status.HTTP_200_OK,
)
def serve_blob(
    token: str,
    disposition: Literal["inline", "attachment"] = Query("inline"),
    filename: str = Query("blob"),
    storage: StorageService = Depends(get_storage),
):
    """
    Stream a blob addressed by a signed, expiring key token.

    Tokens are issued by ``LocalFilesystemService.url``.

    Args:
        token: Signed token carrying the blob key and its expiry
        disposition: Content-Disposition type of the response
        filename: Filename hint for the Content-Disposition header
        storage: Storage service

    Returns:
        StreamingResponse with the blob content

    Raises:
        HTTPException 404: Invalid or expired token, or blob not stored
    """
    payload = decode_key(token, purpose="blob_key")
    if payload is None:
        logger.warning("Blob download rejected: invalid or expired token")
        raise _not_found("Blob not found")

    key = payload["key"]
    if not storage.exists(key):
        logger.warning(f"Blob download failed, not stored: key={key}")
        raise _not_found("Blob not found")

    return StreamingResponse(
        storage.download_chunks(key),
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(disposition, filename)},
    )


@router.put(
    "/{token}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def upload_blob(
    token: str,
    request: Request,
    storage: StorageService = Depends(get_storage),
):
    """
    Accept a direct upload addressed by a signed upload token.

    Tokens are issued by ``LocalFilesystemService.url_for_direct_upload``
    and pin the content type, length and MD5 checksum of the upload.

    Raises:
        HTTPException 404: Invalid or expired token
        HTTPException 422: Body does not match the token's type, length or checksum
    """
    payload = decode_key(token, purpose="blob_upload")
    if payload is None:
        logger.warning("Blob upload rejected: invalid or expired token")
        raise _not_found("Upload URL not found")

    key = payload["key"]
    body = await request.body()

    if request.headers.get("content-type") != payload.get("content_type"):
        raise _unprocessable("Content-Type does not match the upload URL")

    if len(body) != payload.get("content_length"):
        raise _unprocessable("Content length does not match the upload URL")

    checksum = base64.b64encode(hashlib.md5(body).digest()).decode()
    if checksum != payload.get("checksum"):
        logger.warning(f"Blob upload checksum mismatch: key={key}")
        raise _unprocessable("Checksum does not match the uploaded content")

    # Storage services block, keep them off the event loop
    await run_in_threadpool(storage.upload, key, BytesIO(body), checksum=checksum)
    logger.info(f"Blob uploaded directly: key={key}, size={len(body)}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)

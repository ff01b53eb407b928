"""Large-file upload through a Graph upload session, one chunk at a time."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from onedrive_transfer.graph.client import (
    ChunkUploadFailed,
    GraphClient,
    GraphResponse,
    SessionCreateFailed,
)
from onedrive_transfer.graph.drives import upload_session_url
from onedrive_transfer.graph.models import (
    FIELD_EXPIRATION,
    FIELD_ID,
    FIELD_UPLOAD_URL,
    ItemRecord,
    UploadResult,
    UploadSession,
)
from onedrive_transfer.graph.splitter import ChunkDescriptor, split, validate_chunk_size

if TYPE_CHECKING:
    from onedrive_transfer.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10 * 1024 * 1024
DEFAULT_CONFLICT_BEHAVIOR = "replace"
HTTP_OK = 200
HTTP_COMPLETED = (200, 201)


class ChunkedUploader:
    """Uploads local files to a drive folder via upload sessions.

    Chunks are sent strictly in ascending byte order. A failed request ends
    the upload; nothing is retried and the session is not reused.
    """

    def __init__(
        self,
        graph_client: GraphClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        conflict_behavior: str = DEFAULT_CONFLICT_BEHAVIOR,
    ) -> None:
        """Initialise the uploader.

        Args:
            graph_client: Authenticated GraphClient.
            chunk_size: Default bytes per chunk; must be a multiple of 320 KiB.
            conflict_behavior: What the service does when a file with the same
                name exists ("replace", "rename" or "fail").

        Raises:
            ValueError: If *chunk_size* is not correctly aligned.
        """
        validate_chunk_size(chunk_size)
        self._graph = graph_client
        self._chunk_size = chunk_size
        self._conflict_behavior = conflict_behavior

    def create_session(self, drive_id: str, folder_id: str, filename: str) -> UploadSession:
        """Open an upload session for *filename* inside a folder.

        Raises:
            SessionCreateFailed: If the service does not answer 200 or the
                response lacks an upload URL.
        """
        body = {
            "item": {"@microsoft.graph.conflictBehavior": self._conflict_behavior},
            "deferCommit": False,
        }
        response = self._graph.post_json(upload_session_url(drive_id, folder_id, filename), body)
        if response.status != HTTP_OK:
            logger.error(
                "[create_session] upload session rejected; filename:%s;status:%d",
                filename,
                response.status,
            )
            raise SessionCreateFailed(response.status, response.error_detail())

        payload = response.json()
        upload_url = payload.get(FIELD_UPLOAD_URL)
        if not upload_url:
            raise SessionCreateFailed(response.status, "response did not contain an uploadUrl")
        logger.info("[create_session] upload session created; filename:%s", filename)
        return UploadSession(
            upload_url=upload_url,
            expiration_date_time=payload.get(FIELD_EXPIRATION, ""),
        )

    def send_chunk(self, session: UploadSession, chunk: ChunkDescriptor) -> GraphResponse:
        """PUT one chunk to the session URL.

        Raises:
            ChunkUploadFailed: If the service answers with a non-2xx status.
        """
        data = chunk.read()
        response = self._graph.send(
            "PUT",
            session.upload_url,
            data=data,
            headers={
                "Content-Length": str(len(data)),
                "Content-Range": chunk.content_range,
                "Content-Type": "application/octet-stream",
            },
            authenticated=False,
        )
        if not response.ok:
            logger.error(
                "[send_chunk] chunk rejected; chunk_index:%d;range:%s;status:%d",
                chunk.index,
                chunk.content_range,
                response.status,
            )
            raise ChunkUploadFailed(chunk.index, response.status, response.error_detail())
        logger.debug(
            "[send_chunk] chunk accepted; chunk_index:%d;range:%s;status:%d",
            chunk.index,
            chunk.content_range,
            response.status,
        )
        return response

    @staticmethod
    def _completed_item(last: ChunkDescriptor, response: GraphResponse) -> ItemRecord:
        """Parse the uploaded item from the final chunk's response.

        Only 200 or 201 with an item ``id`` means the file was committed; a 202
        means the session still expects ranges.

        Raises:
            ChunkUploadFailed: If the final response does not carry the item.
        """
        if response.status not in HTTP_COMPLETED:
            logger.error(
                "[_completed_item] upload not committed; chunk_index:%d;status:%d",
                last.index,
                response.status,
            )
            raise ChunkUploadFailed(
                last.index, response.status, "upload session did not complete"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ChunkUploadFailed(
                last.index, response.status, "final response is not valid JSON"
            ) from exc
        if not isinstance(payload, dict) or not payload.get(FIELD_ID):
            raise ChunkUploadFailed(
                last.index, response.status, "final response did not contain the uploaded item"
            )
        return ItemRecord.from_json(payload)

    def upload(
        self,
        drive_id: str,
        folder_id: str,
        source_path: str | Path,
        chunk_size: int | None = None,
    ) -> UploadResult:
        """Upload a local file into a drive folder.

        Steps:
            1. Validate the chunk size and the source file (no network yet).
            2. Create an upload session named after the source file.
            3. Split the file and send every chunk in ascending order.
            4. Parse the final chunk's response into the uploaded item.

        Args:
            drive_id: Target drive ID.
            folder_id: Target folder item ID ("root" for the drive root).
            source_path: Local file to upload.
            chunk_size: Overrides the uploader's default chunk size.

        Returns:
            UploadResult with the uploaded item's metadata.

        Raises:
            ValueError: If the chunk size is misaligned or the file is empty.
            FileNotFoundError: If *source_path* is not a regular file.
            SessionCreateFailed: If the upload session cannot be created.
            ChunkUploadFailed: If any chunk is rejected.
        """
        size = self._chunk_size if chunk_size is None else chunk_size
        validate_chunk_size(size)

        path = Path(source_path)
        if not path.is_file():
            raise FileNotFoundError(f"Upload source is not a file: {path}")
        if os.path.getsize(path) == 0:
            raise ValueError(f"Upload sessions cannot carry an empty file: {path}")

        session = self.create_session(drive_id, folder_id, path.name)

        chunks = split(path, size)
        logger.info(
            "[upload] uploading file; filename:%s;total_size:%d;chunk_count:%d",
            path.name,
            chunks[0].total_size,
            len(chunks),
        )

        for chunk in chunks[:-1]:
            self.send_chunk(session, chunk)
        last = chunks[-1]
        response = self.send_chunk(session, last)

        item = self._completed_item(last, response)
        logger.info(
            "[upload] upload complete; filename:%s;item_id:%s;size:%d",
            path.name,
            item.id,
            item.size,
        )
        return UploadResult(
            item=item,
            chunk_count=len(chunks),
            bytes_sent=sum(chunk.length for chunk in chunks),
        )


def chunked_uploader_from_config(graph_client: GraphClient, config: AppConfig) -> ChunkedUploader:
    """Construct a ChunkedUploader from application configuration.

    Args:
        graph_client: Authenticated GraphClient instance.
        config: Application configuration instance.

    Returns:
        Configured ChunkedUploader instance.
    """
    return ChunkedUploader(graph_client=graph_client, chunk_size=config.chunk_size)

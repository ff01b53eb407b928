"""Drive transfer — folder listing, export, bulk download and upload."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from onedrive_transfer.graph.client import GraphClient, graph_client_from_config
from onedrive_transfer.graph.download import download_from_url, download_item
from onedrive_transfer.graph.drives import ROOT_FOLDER_ID, children_url
from onedrive_transfer.graph.listing import list_all, write_listing_csv
from onedrive_transfer.graph.models import ItemRecord, UploadResult
from onedrive_transfer.graph.upload import ChunkedUploader, chunked_uploader_from_config

if TYPE_CHECKING:
    from onedrive_transfer.config import AppConfig

logger = logging.getLogger(__name__)


class DriveTransfer:
    """Combines listing, download and upload against one GraphClient."""

    def __init__(self, graph_client: GraphClient, uploader: ChunkedUploader) -> None:
        """Initialise the transfer service.

        Args:
            graph_client: Authenticated GraphClient used for listing and download.
            uploader: ChunkedUploader bound to the same client.
        """
        self._graph = graph_client
        self._uploader = uploader

    def list_folder(self, drive_id: str, folder_id: str = ROOT_FOLDER_ID) -> list[ItemRecord]:
        """Return every child of a folder, following pagination to the end."""
        items = list_all(self._graph, children_url(drive_id, folder_id))
        logger.info(
            "[list_folder] listed folder; drive_id:%s;folder_id:%s;item_count:%d",
            drive_id,
            folder_id,
            len(items),
        )
        return items

    def export_listing(
        self, drive_id: str, folder_id: str, csv_path: str | Path
    ) -> list[ItemRecord]:
        """List a folder and write the result as CSV.

        Nothing is written if the listing fails part-way.
        """
        items = self.list_folder(drive_id, folder_id)
        write_listing_csv(items, csv_path)
        return items

    def download_folder(
        self, drive_id: str, folder_id: str, destination_dir: str | Path
    ) -> list[Path]:
        """Download every file directly inside a folder (sub-folders are skipped).

        Files are fetched one after another. A pre-authenticated download URL
        from the listing is used when present.

        Returns:
            Local paths of the downloaded files, in listing order.
        """
        target = Path(destination_dir)
        downloaded: list[Path] = []
        for item in self.list_folder(drive_id, folder_id):
            if item.is_folder:
                continue
            local_path = target / item.name
            if item.download_url:
                download_from_url(self._graph, item.download_url, local_path)
            else:
                download_item(self._graph, drive_id, item.id, local_path)
            downloaded.append(local_path)
        logger.info(
            "[download_folder] folder downloaded; folder_id:%s;file_count:%d",
            folder_id,
            len(downloaded),
        )
        return downloaded

    def upload_file(
        self,
        drive_id: str,
        folder_id: str,
        source_path: str | Path,
        chunk_size: int | None = None,
    ) -> UploadResult:
        """Upload a local file into a folder through a chunked upload session."""
        return self._uploader.upload(drive_id, folder_id, source_path, chunk_size)


def drive_transfer_from_config(config: AppConfig) -> DriveTransfer:
    """Construct a DriveTransfer from application configuration.

    Creates a GraphClient and ChunkedUploader from the config, then
    wires them into a DriveTransfer.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveTransfer instance.
    """
    client = graph_client_from_config(config)
    uploader = chunked_uploader_from_config(client, config)
    return DriveTransfer(graph_client=client, uploader=uploader)

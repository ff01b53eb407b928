"""Drive, site and item lookups plus the endpoint paths they share."""

from __future__ import annotations

import logging
from urllib.parse import quote

from onedrive_transfer.graph.client import GraphClient
from onedrive_transfer.graph.listing import iter_raw_pages
from onedrive_transfer.graph.models import FIELD_ID, DriveInfo, ItemRecord

logger = logging.getLogger(__name__)

ROOT_FOLDER_ID = "root"


def children_url(drive_id: str, folder_id: str = ROOT_FOLDER_ID) -> str:
    """Return the listing path for the children of a folder."""
    return f"/drives/{drive_id}/items/{folder_id}/children"


def content_url(drive_id: str, item_id: str) -> str:
    """Return the download path for a file's content."""
    return f"/drives/{drive_id}/items/{item_id}/content"


def upload_session_url(drive_id: str, folder_id: str, filename: str) -> str:
    """Return the createUploadSession path for a file inside a folder."""
    return f"/drives/{drive_id}/items/{folder_id}:/{quote(filename)}:/createUploadSession"


def _list_drives(client: GraphClient, endpoint_url: str) -> list[DriveInfo]:
    drives = [
        DriveInfo.from_json(raw)
        for values, _ in iter_raw_pages(client, endpoint_url)
        for raw in values
    ]
    logger.info("[_list_drives] listed drives; drive_count:%d", len(drives))
    return drives


def list_user_drives(client: GraphClient, user: str) -> list[DriveInfo]:
    """List the drives of a user (UPN or object ID).

    ``/me`` is not available with app permissions, so the user is explicit.
    """
    return _list_drives(client, f"/users/{quote(user)}/drives")


def list_site_drives(client: GraphClient, site_id: str) -> list[DriveInfo]:
    """List the document libraries of a SharePoint site."""
    return _list_drives(client, f"/sites/{site_id}/drives")


def get_site_id(client: GraphClient, hostname: str, site_path: str) -> str:
    """Resolve a SharePoint site to its Graph ID.

    Args:
        client: Authenticated GraphClient.
        hostname: SharePoint host, e.g. ``contoso.sharepoint.com``.
        site_path: Server-relative site path, e.g. ``/sites/Finance``.

    Returns:
        The composite site ID.

    Raises:
        GraphApiError: If the site cannot be found.
    """
    path = site_path.strip("/")
    response = client.get(f"/sites/{hostname}:/{quote(path)}")
    site_id = str(response[FIELD_ID])
    logger.info("[get_site_id] resolved site; hostname:%s;site_path:%s", hostname, site_path)
    return site_id


def get_item_by_path(client: GraphClient, drive_id: str, path: str) -> ItemRecord:
    """Look up a file or folder by its path from the drive root.

    Raises:
        GraphApiError: If no item exists at the path.
    """
    clean = path.strip("/")
    if not clean:
        return ItemRecord.from_json(client.get(f"/drives/{drive_id}/root"))
    return ItemRecord.from_json(client.get(f"/drives/{drive_id}/root:/{quote(clean)}"))

"""Data models for Microsoft Graph drive items, drives and upload sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_SIZE = "size"
FIELD_WEB_URL = "webUrl"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_CREATED = "createdDateTime"
FIELD_ETAG = "eTag"
FIELD_CTAG = "cTag"
FIELD_DOWNLOAD_URL = "@microsoft.graph.downloadUrl"
FIELD_FILE = "file"
FIELD_MIME_TYPE = "mimeType"
FIELD_FOLDER = "folder"
FIELD_CHILD_COUNT = "childCount"
FIELD_DRIVE_TYPE = "driveType"
FIELD_OWNER = "owner"
FIELD_USER = "user"
FIELD_GROUP = "group"
FIELD_DISPLAY_NAME = "displayName"
FIELD_UPLOAD_URL = "uploadUrl"
FIELD_EXPIRATION = "expirationDateTime"

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

# Column order of the tabular listing output
LISTING_COLUMNS = (
    "id",
    "name",
    "size",
    "webUrl",
    "lastModifiedDateTime",
    "createdDateTime",
    "eTag",
    "cTag",
    "downloadUrl",
    "fileMimeType",
    "isFolder",
    "folderItemsCount",
)


@dataclass(frozen=True)
class ItemRecord:
    """A single file or folder entry from a drive listing."""

    id: str
    name: str
    size: int = 0
    web_url: str = ""
    last_modified_date_time: str = ""
    created_date_time: str = ""
    e_tag: str = ""
    c_tag: str = ""
    download_url: str | None = None
    file_mime_type: str | None = None
    is_folder: bool = False
    folder_items_count: int | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> ItemRecord:
        """Map a raw Graph driveItem dict to an ItemRecord.

        Items without a ``file`` or ``folder`` facet are accepted; the
        corresponding fields stay None.
        """
        file_facet = raw.get(FIELD_FILE) or {}
        folder_facet = raw.get(FIELD_FOLDER)
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            size=int(raw.get(FIELD_SIZE) or 0),
            web_url=raw.get(FIELD_WEB_URL, ""),
            last_modified_date_time=raw.get(FIELD_LAST_MODIFIED, ""),
            created_date_time=raw.get(FIELD_CREATED, ""),
            e_tag=raw.get(FIELD_ETAG, ""),
            c_tag=raw.get(FIELD_CTAG, ""),
            download_url=raw.get(FIELD_DOWNLOAD_URL),
            file_mime_type=file_facet.get(FIELD_MIME_TYPE),
            is_folder=folder_facet is not None,
            folder_items_count=(folder_facet or {}).get(FIELD_CHILD_COUNT),
        )

    def to_row(self) -> dict[str, Any]:
        """Render the record keyed by LISTING_COLUMNS."""
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "webUrl": self.web_url,
            "lastModifiedDateTime": self.last_modified_date_time,
            "createdDateTime": self.created_date_time,
            "eTag": self.e_tag,
            "cTag": self.c_tag,
            "downloadUrl": self.download_url,
            "fileMimeType": self.file_mime_type,
            "isFolder": self.is_folder,
            "folderItemsCount": self.folder_items_count,
        }


@dataclass(frozen=True)
class ListingPage:
    """One page of a paginated listing response."""

    items: tuple[ItemRecord, ...]
    next_link: str | None = None


@dataclass(frozen=True)
class DriveInfo:
    """A OneDrive or SharePoint document library."""

    id: str
    name: str
    drive_type: str = ""
    web_url: str = ""
    owner_name: str = ""

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> DriveInfo:
        owner = raw.get(FIELD_OWNER) or {}
        identity = owner.get(FIELD_USER) or owner.get(FIELD_GROUP) or {}
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            drive_type=raw.get(FIELD_DRIVE_TYPE, ""),
            web_url=raw.get(FIELD_WEB_URL, ""),
            owner_name=identity.get(FIELD_DISPLAY_NAME, ""),
        )


@dataclass(frozen=True)
class UploadSession:
    """A server-issued upload session; valid for one upload only."""

    upload_url: str
    expiration_date_time: str = ""


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a completed chunked upload."""

    item: ItemRecord
    chunk_count: int
    bytes_sent: int

"""HTTP trigger blueprint — health check and folder listing endpoints."""

import json
import logging
from typing import Any

import azure.functions as func

from onedrive_transfer import __version__
from onedrive_transfer.config import load_config
from onedrive_transfer.graph.client import GraphApiError
from onedrive_transfer.graph.drives import ROOT_FOLDER_ID
from onedrive_transfer.orchestration.transfer import drive_transfer_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _json_response(payload: dict[str, Any], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload), status_code=status_code, mimetype="application/json"
    )


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint.

    Returns service status and version.
    """
    logger.info("[health_check] health check requested")

    try:
        return _json_response({"status": "ok", "version": __version__}, 200)

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)


@bp.route(route="items", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def list_items(req: func.HttpRequest) -> func.HttpResponse:
    """List a drive folder as tabular rows.

    Query parameters:
        drive_id: Drive to list; falls back to OT_DRIVE_ID.
        folder_id: Folder item ID (default: the drive root).

    Requires a function key. Graph errors are reported with their upstream
    status code in the body and a 502 response.
    """
    logger.info("[list_items] listing requested")

    try:
        config = load_config()
        drive_id = req.params.get("drive_id") or config.drive_id
        if not drive_id:
            return _json_response({"status": "error", "message": "drive_id is required"}, 400)
        folder_id = req.params.get("folder_id") or ROOT_FOLDER_ID

        transfer = drive_transfer_from_config(config)
        items = transfer.list_folder(drive_id, folder_id)
        logger.info(
            "[list_items] listing complete; drive_id:%s;folder_id:%s;item_count:%d",
            drive_id,
            folder_id,
            len(items),
        )
        return _json_response(
            {"status": "ok", "count": len(items), "items": [item.to_row() for item in items]},
            200,
        )

    except GraphApiError as exc:
        logger.error(
            "[list_items] graph request failed; status:%d", exc.status_code, exc_info=True
        )
        return _json_response(
            {"status": "error", "upstream_status": exc.status_code, "message": exc.message},
            502,
        )

    except Exception:
        logger.error("[list_items] listing failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)

"""
Datasette plugin for a community business directory.

Visitors search published businesses and suggest new ones; admins review the
suggestion queue and promote suggestions into the directory or reject them.
Every route speaks JSON; page rendering is left to the site's templates.
"""

import json
import logging
from typing import Any

from datasette import Response, hookimpl
from datasette.utils.asgi import Request

from .config import PLUGIN_NAME, DirectoryConfig
from .classifier import keyword_classifier
from .errors import StoreError, StoreNotConfigured, ValidationError
from .search import SearchQuery, featured_businesses, search_businesses
from .store import RecordStore, SQLiteRecordStore, build_store
from .workflows import list_suggestions, promote_suggestion, reject_suggestion, submit_suggestion

logger = logging.getLogger(__name__)

API_PREFIX = "/-/directory/api/"

SUBMITTED_MESSAGE = "Thank you! Your suggestion was submitted."
SUBMIT_FAILED_MESSAGE = "Something went wrong. Please try again."
SEARCH_FAILED_MESSAGE = "Something went wrong while searching. Please try again."
LIST_FAILED_MESSAGE = "Something went wrong while loading suggestions."

TRUTHY = {"1", "true", "on", "yes"}

# -----------------------------------------------------------------------------
# Plugin Configuration
# -----------------------------------------------------------------------------


def get_plugin_config(datasette) -> DirectoryConfig:
    """Get plugin configuration from datasette.yaml."""
    return DirectoryConfig.from_dict(datasette.plugin_config(PLUGIN_NAME) or {})


def get_store(config: DirectoryConfig) -> RecordStore:
    """Build the record store for this request.

    Raises:
        StoreNotConfigured: the configured backend is missing settings.
    """
    store = build_store(config)
    if store is None:
        raise StoreNotConfigured()
    if isinstance(store, SQLiteRecordStore):
        from .migrations import run_migrations

        run_migrations(store.db_path)
    return store


# -----------------------------------------------------------------------------
# Request Helpers
# -----------------------------------------------------------------------------


def is_admin(request: Request, config: DirectoryConfig) -> bool:
    """Check if the current actor may moderate suggestions."""
    actor = request.actor
    if not actor:
        return False
    return actor.get("principal_type") == "admin" or actor.get("id") in config.admin_actor_ids


def error_response(message: str, status: int) -> Response:
    return Response.json({"error": message}, status=status)


class InvalidBody(Exception):
    pass


async def read_json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Anything that parses but is not an object is treated as empty, so the
    required-field checks report it.
    """
    body = await request.post_body()
    try:
        data = json.loads(body or b"")
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Error parsing JSON body: {e}")
        raise InvalidBody() from e
    return data if isinstance(data, dict) else {}


async def admin_json_request(request: Request, datasette) -> tuple[RecordStore, dict] | Response:
    """Shared gate for admin write routes: method, actor, store, body."""
    if request.method != "POST":
        return error_response("Method not allowed.", 405)

    config = get_plugin_config(datasette)
    if not is_admin(request, config):
        return error_response("Forbidden.", 403)

    try:
        store = get_store(config)
    except StoreNotConfigured as e:
        return error_response(e.message, 500)

    try:
        payload = await read_json_body(request)
    except InvalidBody:
        return error_response("Invalid JSON body.", 400)

    return store, payload


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


async def promote_view(request: Request, datasette) -> Response:
    """Publish a suggestion as a business."""
    gate = await admin_json_request(request, datasette)
    if isinstance(gate, Response):
        return gate
    store, payload = gate

    try:
        result = await promote_suggestion(store, payload)
    except ValidationError as e:
        return error_response(e.message, 400)
    except StoreError as e:
        return error_response(e.message, 500)

    if not result.suggestion_cleared:
        logger.warning(f"Business {result.business.id} published; suggestion left pending")
    return Response.json({"success": True})


async def reject_view(request: Request, datasette) -> Response:
    """Discard a suggestion."""
    gate = await admin_json_request(request, datasette)
    if isinstance(gate, Response):
        return gate
    store, payload = gate

    try:
        await reject_suggestion(store, payload.get("suggestionId"))
    except ValidationError as e:
        return error_response(e.message, 400)
    except StoreError as e:
        return error_response(e.message, 500)

    return Response.json({"success": True})


async def suggest_view(request: Request, datasette) -> Response:
    """Accept a public business suggestion."""
    if request.method != "POST":
        return error_response("Method not allowed.", 405)

    config = get_plugin_config(datasette)
    try:
        store = get_store(config)
    except StoreNotConfigured as e:
        return error_response(e.message, 500)

    try:
        payload = await read_json_body(request)
    except InvalidBody:
        return error_response("Invalid JSON body.", 400)

    submissions = config.submissions
    try:
        await submit_suggestion(
            store,
            payload,
            require_city=submissions.require_city,
            default_state=submissions.default_state,
            honeypot_field=submissions.honeypot_field,
        )
    except ValidationError as e:
        return error_response(e.message, 400)
    except StoreError as e:
        logger.error(f"Error storing suggestion: {e.message}")
        return error_response(SUBMIT_FAILED_MESSAGE, 500)

    return Response.json({"success": True, "message": SUBMITTED_MESSAGE})


async def suggestions_view(request: Request, datasette) -> Response:
    """Admin review queue."""
    config = get_plugin_config(datasette)
    if not is_admin(request, config):
        return error_response("Forbidden.", 403)

    try:
        store = get_store(config)
        items = await list_suggestions(
            store,
            text=request.args.get("q", ""),
            is_imported=keyword_classifier(config.import_signals),
        )
    except StoreNotConfigured as e:
        return error_response(e.message, 500)
    except StoreError:
        return error_response(LIST_FAILED_MESSAGE, 500)

    return Response.json(
        {
            "suggestions": [item.to_dict() for item in items],
            "count": len(items),
        }
    )


async def search_view(request: Request, datasette) -> Response:
    """Search published businesses."""
    config = get_plugin_config(datasette)
    query = SearchQuery(
        location=request.args.get("location", ""),
        category=request.args.get("category", ""),
        verified_only=request.args.get("verified_only", "").lower() in TRUTHY,
    )

    try:
        store = get_store(config)
        results = await search_businesses(store, query, log_events=config.log_searches)
    except StoreNotConfigured as e:
        return error_response(e.message, 500)
    except StoreError:
        return error_response(SEARCH_FAILED_MESSAGE, 500)

    return Response.json(
        {
            "results": [business.to_dict() for business in results],
            "count": len(results),
        }
    )


async def featured_view(request: Request, datasette) -> Response:
    """Featured businesses shown before any search."""
    config = get_plugin_config(datasette)
    try:
        store = get_store(config)
        results = await featured_businesses(store)
    except StoreNotConfigured as e:
        return error_response(e.message, 500)
    except StoreError:
        return error_response(SEARCH_FAILED_MESSAGE, 500)

    return Response.json({"results": [business.to_dict() for business in results]})


# -----------------------------------------------------------------------------
# Datasette Hooks
# -----------------------------------------------------------------------------


@hookimpl
def register_routes():
    """Register plugin routes with Datasette."""
    return [
        # Public routes
        (r"^/-/directory/search\.json$", search_view),
        (r"^/-/directory/featured\.json$", featured_view),
        (r"^/-/directory/api/suggest$", suggest_view),
        # Admin routes
        (r"^/-/directory/api/suggestions$", suggestions_view),
        (r"^/-/directory/api/promote$", promote_view),
        (r"^/-/directory/api/reject$", reject_view),
    ]


@hookimpl
def skip_csrf(datasette, scope):
    """JSON API routes are called with fetch(), not HTML forms."""
    if scope.get("path", "").startswith(API_PREFIX):
        return True
    return None


@hookimpl
def startup(datasette):
    """Bring the SQLite store's schema up to date on startup."""
    config = get_plugin_config(datasette)
    store = build_store(config)
    if store is None:
        logger.warning("Record store is not configured; directory routes will return errors")
        return
    if isinstance(store, SQLiteRecordStore):
        from .migrations import run_migrations

        applied = run_migrations(store.db_path)
        if applied:
            logger.info(f"Applied directory migrations: {applied}")

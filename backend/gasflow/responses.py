# Overview: JSON response envelope and pagination helpers for API routes.

from __future__ import annotations

import math

from flask import current_app, jsonify


def success(data=None, message: str = "Success", status: int = 200):
    return jsonify({"success": True, "data": data, "message": message}), status


def created(data=None, message: str = "Created successfully"):
    return success(data, message, 201)


def paginated(items: list, *, page: int, limit: int, total: int, message: str = "Success", **extra):
    body = {
        "success": True,
        "data": items,
        "message": message,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    }
    body.update(extra)
    return jsonify(body), 200


def error(message: str, status: int = 400, errors: dict | None = None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def parse_pagination(args) -> tuple[int, int]:
    """
    Read page/limit from query args.

    page defaults to 1 and is floored at 1; limit defaults to DEFAULT_PAGE_SIZE
    and is clamped to [1, MAX_PAGE_SIZE].
    """
    default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 100)

    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", default_limit, type=int) or default_limit

    if page < 1:
        page = 1
    if limit < 1:
        limit = 1
    if limit > max_limit:
        limit = max_limit
    return page, limit

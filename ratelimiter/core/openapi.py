"""OpenAPI metadata customization.

Adds tag descriptions and documents the shared error envelope returned by the
global exception handlers, keeping documentation concerns out of the app
factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "RateLimit",
        "description": "Fixed-window admission decisions for request descriptors.",
    },
    {
        "name": "Health",
        "description": "Liveness and readiness checks.",
    },
]

ERROR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "request_id": {"type": "string", "nullable": True},
                "details": {"type": "object"},
            },
            "required": ["code", "message"],
        }
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and the error schema.

    - Adds tags metadata if not present
    - Registers ``ErrorResponse`` under components.schemas
    - Documents 503 (store unavailable) on the rate limit decision endpoint
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        components = schema.setdefault("components", {})
        components.setdefault("schemas", {}).setdefault("ErrorResponse", ERROR_SCHEMA)

        error_ref = {"$ref": "#/components/schemas/ErrorResponse"}
        for path, methods in schema.get("paths", {}).items():
            if not path.endswith("/fixedwindow"):
                continue
            post = methods.get("post")
            if isinstance(post, dict):
                post.setdefault("responses", {}).setdefault(
                    "503",
                    {
                        "description": "Counter store unavailable.",
                        "content": {"application/json": {"schema": error_ref}},
                    },
                )

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]

"""OpenAPI customization utilities.

Adds the two security schemes used by the API to the generated schema:

- ``BearerAuth``: session token from ``POST /v1/auth/login``
- ``AdminToken``: static ``X-Admin-Token`` header for ``/v1/admin/*``

Operations are annotated per path prefix; health and login stay public.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

PUBLIC_PATH_SUFFIXES = ("/health", "/auth/login")

TAGS_METADATA = [
    {"name": "Auth", "description": "Session login, logout and introspection."},
    {"name": "Users", "description": "User registration and profile management."},
    {"name": "Posts", "description": "Draft, publish and list posts."},
    {"name": "Preferences", "description": "Per-user preference storage."},
    {"name": "Admin", "description": "Operator overrides (requires X-Admin-Token)."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security schemes."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token returned by POST /v1/auth/login.",
            },
        )
        security_schemes.setdefault(
            "AdminToken",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-Admin-Token",
                "description": "Static operator token (APP_ADMIN_TOKEN).",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(PUBLIC_PATH_SUFFIXES):
                security: list[dict[str, list[str]]] = []
            elif "/admin/" in path:
                security = [{"AdminToken": []}]
            else:
                security = [{"BearerAuth": []}]

            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = security

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]

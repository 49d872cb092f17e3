"""Builders for remote catalog JSON used across tests."""

import json
from typing import Any

URL_PRIMARY = "https://primary.example.com/extensions.json"
URL_MIRROR = "https://mirror.example.com/extensions.json"


def package_dict(package_id: str, **overrides: Any) -> dict[str, Any]:
    """A catalog package entry in wire format (camelCase keys)."""
    data: dict[str, Any] = {
        "id": package_id,
        "displayName": f"{package_id} display",
        "description": f"{package_id} description",
        "author": "Tester",
        "latestVersion": "1.0.0",
        "category": "Community",
        "packageUrl": f"https://registry.example.com/{package_id}",
        "dependencies": [],
    }
    data.update(overrides)
    return data


def catalog_json(version: str | None = "2.1", packages: list[dict[str, Any]] | None = None) -> str:
    if packages is None:
        packages = [package_dict("com.x.y", category="Vision")]
    body: dict[str, Any] = {"extensions": {"packages": packages}}
    if version is not None:
        body["version"] = version
    return json.dumps(body)

"""Print the OpenAPI schema of the storefront API as JSON.

Usage: python scripts/generate_openapi.py > openapi.json
"""

import json

from app.main import app


def generate_schema() -> dict:  # type: ignore[type-arg]
    return app.openapi()


if __name__ == "__main__":
    print(json.dumps(generate_schema(), indent=2))

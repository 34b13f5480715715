"""
JSON Schema validation of the workspace files (customer, site snapshot, issues).

jsonschema is optional. Without it every document is reported valid with a
warning entry, so audits never fail just because validation is unavailable.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

try:
    import jsonschema
except ImportError:  # optional dependency
    jsonschema = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).resolve().parent / "schemas"
REQUIRED_SCHEMAS = ("customer.json", "site_snapshot.json", "issues.json")


def load_schema(schema_name: str, schemas_dir: str | Path | None = None) -> dict[str, Any] | None:
    path = Path(schemas_dir or SCHEMAS_DIR) / f"{schema_name}.json"
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to load schema %s: %s", schema_name, exc)
        return None


def validate_json_file(data_path: str | Path, schema_name: str, schemas_dir: str | Path | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"valid": False, "errors": [], "data": None}

    try:
        result["data"] = json.loads(Path(data_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        result["errors"].append({"type": "parse", "message": f"Failed to parse JSON: {exc}"})
        return result

    schema = load_schema(schema_name, schemas_dir)
    if schema is None:
        result["errors"].append({"type": "schema", "message": f"Schema {schema_name} not found"})
        return result

    if jsonschema is None:
        logger.warning("jsonschema not installed - schema validation limited")
        result["valid"] = True
        result["errors"].append({"type": "warning", "message": "jsonschema not available - skipping strict validation"})
        return result

    validator_cls = jsonschema.validators.validator_for(schema)
    validator = validator_cls(schema)
    errors = sorted(validator.iter_errors(result["data"]), key=lambda e: list(e.absolute_path))
    for err in errors:
        location = "/".join(str(p) for p in err.absolute_path) or "(root)"
        result["errors"].append({"type": "validation", "path": location, "message": err.message})
    result["valid"] = not errors
    return result


def validate_customer(customer_path: str | Path) -> dict[str, Any]:
    return validate_json_file(customer_path, "customer")


def validate_site_snapshot(snapshot_path: str | Path) -> dict[str, Any]:
    return validate_json_file(snapshot_path, "site_snapshot")


def validate_issues(issues_path: str | Path) -> dict[str, Any]:
    return validate_json_file(issues_path, "issues")


def verify_schemas(schemas_dir: str | Path | None = None) -> dict[str, Any]:
    base = Path(schemas_dir or SCHEMAS_DIR)
    missing = [name for name in REQUIRED_SCHEMAS if not (base / name).is_file()]
    return {"valid": not missing, "missing": missing}

import fnmatch
import json
from pathlib import Path


def load_schemas():
    """Tries to load all schemas from the schemas directory."""
    try:
        base = Path(__file__).parent / "schemas"
        with open(base / "bed_telemetry.schema.json") as f:
            bed_telemetry_schema = json.load(f)
        return {
            "+/+/data": bed_telemetry_schema,
        }
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error loading schemas: {e}")
        return None


def get_schema_for_topic(schemas, topic):
    """Retrieves the schema for a given topic using wildcard matching."""
    for pattern, schema in schemas.items():
        if fnmatch.fnmatch(topic, pattern.replace("+", "*")):
            return schema
    return None

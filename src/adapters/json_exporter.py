"""JSON export of an identification result.

Why JSON:
- Lets other tools and pipelines consume the result.
- Keeps a record of an identification without re-calling the API.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import PlantIdentification


def identification_to_json(result: PlantIdentification) -> str:
    """Serialize `result` as stable, human-readable JSON."""

    payload = result.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_identification_json(*, result: PlantIdentification, output_path: Path) -> Path:
    """Export `PlantIdentification` to a UTF-8 JSON file."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(identification_to_json(result), encoding="utf-8")
    return output_path

from __future__ import annotations

import hashlib
import json
from typing import Any

from seedforge.gen.spec import GameSpecification


def payload_hash(payload: dict[str, Any]) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def spec_hash(spec: GameSpecification) -> str:
    return payload_hash(spec.to_dict())

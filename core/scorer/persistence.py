#!/usr/bin/env python3
"""
Persistence Operations - Hand-off of score records to a store.

The scoring engine owns no storage. Records are passed to a ScoreSink
supplied by the surrounding application. JsonLinesScoreSink is an
append-only file sink used by the command line entry point: records are
only ever appended, so earlier scores for a property stay untouched when it
is rescored.
"""

import json
import logging
import os
import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

from core.scorer.models import CompositeScore

logger = logging.getLogger(__name__)


class ScoreSink(Protocol):
    def save_score(self, record: CompositeScore) -> None:
        ...


def _to_native_types(obj):
    """Recursively convert Decimal and mapping values to JSON-native types."""
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _to_native_types(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_native_types(item) for item in obj]
    return obj


class JsonLinesScoreSink:
    """Append-only JSON-lines score history."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def save_score(self, record: CompositeScore) -> None:
        line = json.dumps(_to_native_types(record.to_dict()), sort_keys=True)

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        with self._lock:
            with open(self.path, "a") as f:
                f.write(line + "\n")

        logger.info(
            f"Saved score for property {record.property_id}: "
            f"{record.composite_value:.1f} ({record.index_tier.value}, rubric {record.rubric_version})"
        )

    def load_history(self, property_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Read stored records in the order they were saved."""
        if not os.path.exists(self.path):
            return []

        history = []
        with open(self.path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                entry = json.loads(line)
                if property_id is None or entry.get('property_id') == str(property_id):
                    history.append(entry)
        return history

    def load_records(self, property_id: Optional[str] = None) -> List[CompositeScore]:
        """Stored records rebuilt as CompositeScore, e.g. to reproduce them."""
        return [CompositeScore.from_dict(entry) for entry in self.load_history(property_id)]

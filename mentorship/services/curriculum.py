# mentorship/services/curriculum.py
"""
Read-only catalog of the ordered DSA curriculum. Loaded once at startup.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from mentorship.errors import StorageError
from mentorship.schemas.curriculum import CurriculumEntry

logger = logging.getLogger(__name__)


class CurriculumCatalog:
    def __init__(self, entries: Sequence[CurriculumEntry]):
        self._entries: Tuple[CurriculumEntry, ...] = tuple(entries)

    @classmethod
    def load(cls, path: str) -> "CurriculumCatalog":
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot load curriculum from {path}: {e}") from e
        catalog = cls(CurriculumEntry.model_validate(item) for item in raw)
        logger.info(f"Loaded {len(catalog)} curriculum problems from {path}")
        return catalog

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[CurriculumEntry]:
        return list(self._entries)

    def first(self) -> Optional[CurriculumEntry]:
        return self._entries[0] if self._entries else None

    def index_of(self, problem_id: int) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == problem_id:
                return index
        return None

    def next_after(self, problem_id: int) -> Optional[CurriculumEntry]:
        """Entry following problem_id, or None when it is the last (or unknown)"""
        index = self.index_of(problem_id)
        if index is None or index + 1 >= len(self._entries):
            return None
        return self._entries[index + 1]

    @staticmethod
    def task_fields(entry: CurriculumEntry) -> Tuple[str, Dict[str, str]]:
        """Description and resources of the task that tracks entry"""
        description = f"Solve problem #{entry.id} on {entry.platform}"
        resources: Dict[str, str] = {}
        if entry.practice_links:
            resources["practice"] = entry.practice_links[0]
        if entry.resource_links:
            resources["resource"] = entry.resource_links[0]
        return description, resources

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

import pandas as pd

logger = logging.getLogger(__name__)


class DatasetStore(ABC):
    """Create-once, read-many storage for uploaded datasets."""

    @abstractmethod
    def put(self, frame: pd.DataFrame) -> str:
        """Store ``frame`` under a fresh id and return the id."""

    @abstractmethod
    def get(self, dataset_id: str) -> Optional[pd.DataFrame]:
        """Return the dataset, or ``None`` when the id is unknown."""


class InMemoryDatasetStore(DatasetStore):
    """Process-memory store. Entries live until the process exits."""

    def __init__(self) -> None:
        self._datasets: Dict[str, pd.DataFrame] = {}
        self._lock = threading.Lock()

    def put(self, frame: pd.DataFrame) -> str:
        snapshot = frame.copy(deep=True)
        with self._lock:
            dataset_id = str(uuid.uuid4())
            while dataset_id in self._datasets:
                dataset_id = str(uuid.uuid4())
            self._datasets[dataset_id] = snapshot
        logger.info("stored dataset %s (%d rows)", dataset_id, len(snapshot))
        return dataset_id

    def get(self, dataset_id: str) -> Optional[pd.DataFrame]:
        frame = self._datasets.get(dataset_id)
        if frame is None:
            logger.debug("dataset %s not found", dataset_id)
            return None
        return frame.copy(deep=True)

    def __contains__(self, dataset_id: object) -> bool:
        return dataset_id in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)

"""
JSON-file health store.

Persists samples and workouts to a single JSON document and rewrites it
atomically after every save.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from .memory import InMemoryHealthStore
from ..exceptions import CorruptStoreError, StoreWriteError
from ..logging import get_logger
from ..models.samples import QuantitySample, Workout

logger = get_logger(__name__)

FORMAT_VERSION = 1


class JsonHealthStore(InMemoryHealthStore):
    """
    Health store backed by a JSON file.

    File layout::

        {
          "version": 1,
          "samples": [{"id": ..., "quantity_type": "body_mass", ...}],
          "workouts": [{"id": ..., "activity_type": "running", ...}]
        }

    Examples:
        >>> store = JsonHealthStore(Path("~/.metrika/health.json").expanduser())
        >>> store.request_authorization(read=[...], write=[...])
        True
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        available: bool = True,
        grant_authorization: bool = True,
        pretty: bool = True,
    ):
        """
        Args:
            filepath: JSON file to load from and write to.
            available: Whether the store reports health data as available.
            grant_authorization: Whether authorization requests are granted.
            pretty: Indent the written JSON.

        Raises:
            CorruptStoreError: If an existing file cannot be decoded.
        """
        self.filepath = Path(filepath)
        self.pretty = pretty
        samples, workouts = self._load()
        super().__init__(
            available=available,
            grant_authorization=grant_authorization,
            samples=samples,
            workouts=workouts,
        )

    def _load(self) -> tuple[list[QuantitySample], list[Workout]]:
        """Read the store file; a missing file is an empty store."""
        if not self.filepath.exists():
            return [], []

        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptStoreError(str(self.filepath), str(e))

        if not isinstance(data, dict):
            raise CorruptStoreError(str(self.filepath), "top-level value must be an object")
        for key in ("samples", "workouts"):
            if not isinstance(data.get(key, []), list):
                raise CorruptStoreError(str(self.filepath), f"'{key}' must be a list")

        try:
            samples = [QuantitySample.model_validate(item) for item in data.get("samples", [])]
            workouts = [Workout.model_validate(item) for item in data.get("workouts", [])]
        except PydanticValidationError as e:
            first_error = e.errors()[0] if e.errors() else {"msg": str(e)}
            raise CorruptStoreError(str(self.filepath), first_error.get("msg", "validation failed"))

        logger.debug(
            "store_loaded",
            filepath=str(self.filepath),
            samples=len(samples),
            workouts=len(workouts),
        )
        return samples, workouts

    def _persist(self) -> None:
        """Write all records to a temp file and move it over the store file."""
        payload = {
            "version": FORMAT_VERSION,
            "samples": [s.model_dump(mode="json") for s in self._samples],
            "workouts": [w.model_dump(mode="json") for w in self._workouts],
        }

        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.filepath.parent), prefix=".health-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(
                        payload,
                        f,
                        ensure_ascii=False,
                        indent=2 if self.pretty else None,
                    )
                os.replace(tmp_path, self.filepath)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreWriteError("store", str(e))

"""JSON rendering of reports, cards and summaries."""

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel

from ..exceptions import FileWriteError


def encode_value(obj: Any) -> Any:
    """``json.dumps`` fallback for Decimal and date values."""
    if isinstance(obj, Decimal):
        # keep the exact digits
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def drop_none(value: Any) -> Any:
    """Copy of ``value`` with None entries removed from every nested dict."""
    if isinstance(value, dict):
        return {k: drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [drop_none(v) for v in value]
    return value


class JSONWriter:
    """Dumps models (display fields included) as UTF-8 JSON."""

    @staticmethod
    def to_dict(model: BaseModel, exclude_none: bool = True) -> dict:
        data = model.model_dump()
        return drop_none(data) if exclude_none else data

    @staticmethod
    def dumps(data: Any, pretty: bool = True) -> str:
        """Serialize plain data the same way models are serialized."""
        return json.dumps(
            data,
            ensure_ascii=False,
            indent=2 if pretty else None,
            default=encode_value,
        )

    @classmethod
    def to_json_string(cls, model: BaseModel, pretty: bool = True,
                       exclude_none: bool = True) -> str:
        return cls.dumps(cls.to_dict(model, exclude_none), pretty)

    @classmethod
    def write(cls, model: BaseModel, filepath: Union[str, Path],
              pretty: bool = True, exclude_none: bool = True) -> None:
        """
        Write ``model`` to ``filepath``, replacing any existing file.

        Raises:
            FileWriteError: If the file cannot be opened or written.
        """
        text = cls.to_json_string(model, pretty, exclude_none)
        path = Path(filepath)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FileWriteError(str(path), str(e))

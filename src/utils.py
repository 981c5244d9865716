import base64
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from exceptions import SerializationError


def _canonical_json(data: Any) -> str:
    """Serializes data the same way every time: field order kept, compact, UTF-8 text."""
    try:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode payload as JSON: {e}") from e


def _to_base64(text: str) -> str:
    """Base64 of the UTF-8 bytes of text."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _load_json_file(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        raise SerializationError(f"{path} is not valid JSON: {e}") from e


def write_json_atomic(path: str, data: object) -> None:
    """
    Writes JSON to a temporary file beside `path`, then moves it into place,
    so readers never see a half-written file.

    Args:
        path: The path to the target file.
        data: The JSON-serializable data to be written.
    """
    target = Path(path)
    tmp_dir = target.parent if str(target.parent) else Path(".")
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=tmp_dir, delete=False) as tmp:
        json.dump(data, tmp, ensure_ascii=False, indent=2)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_name = tmp.name
    os.replace(tmp_name, target)

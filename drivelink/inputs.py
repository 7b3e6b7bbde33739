"""Bulk input loading.

Reads image references exported from the content store. Accepted shapes:

- JSON or YAML: a list of records (objects with a ``url``, ``imageUrl`` or
  ``raw_url`` field) or of plain URL strings, or an object wrapping such a
  list under ``images``, ``carouselImages``, ``items`` or ``records``
- anything else: plain text, one URL per line, ``#`` lines ignored
"""

import json
from pathlib import Path
from typing import Any, List

import yaml

from .exceptions import InputError
from .models import ImageReference

WRAPPER_KEYS = ("images", "carouselImages", "items", "records")


def load_references(file_path: Path) -> List[ImageReference]:
    """Load image references from a file.

    Raises:
        InputError: If the file cannot be read or has no usable entries
    """
    file_path = Path(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read input file: {e}", file_path=str(file_path))

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = [line for line in text.splitlines() if not line.strip().startswith("#")]
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InputError(f"Cannot parse input file: {e}", file_path=str(file_path))

    references = _to_references(data, str(file_path))
    if not references:
        raise InputError("No image URLs found in input file", file_path=str(file_path))
    return references


def _to_references(data: Any, file_path: str) -> List[ImageReference]:
    if isinstance(data, dict):
        for key in WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            data = [data]

    if not isinstance(data, list):
        raise InputError("Expected a list of image records", file_path=file_path)

    references = []
    for position, item in enumerate(data):
        if isinstance(item, str):
            if item.strip():
                references.append(ImageReference(raw_url=item))
        elif isinstance(item, dict):
            try:
                references.append(ImageReference.from_record(item))
            except ValueError as e:
                raise InputError(f"Entry {position}: {e}", file_path=file_path)
        elif item is not None:
            raise InputError(
                f"Entry {position}: expected a URL or a record, got {type(item).__name__}",
                file_path=file_path,
            )
    return references

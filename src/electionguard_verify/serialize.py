#!/usr/bin/env python
import json
from os import PathLike
from typing import Any, Dict, Union

from pydantic import TypeAdapter, ValidationError

from .errors import FormatError
from .schema import Record

_record_adapter = TypeAdapter(Record)


def record_from_dict(data: Any) -> Record:
    """
    Build a `Record` from decoded JSON. Raises `FormatError` if the
    document does not have the record's shape or a number does not decode
    exactly to a non-negative integer.
    """
    try:
        return _record_adapter.validate_python(data)
    except ValidationError as error:
        raise FormatError(f"malformed election record: {error}") from error


def load_record(path: Union[str, PathLike]) -> Record:
    """
    Read an election record from a JSON file.
    """
    try:
        with open(path, "r", encoding="utf-8") as infile:
            data = json.load(infile)
    except json.JSONDecodeError as error:
        raise FormatError(f"election record is not valid JSON: {error}") from error
    except UnicodeDecodeError as error:
        raise FormatError(f"election record is not UTF-8 text: {error}") from error
    return record_from_dict(data)


def record_to_dict(record: Record) -> Dict[str, Any]:
    """
    The JSON-ready form of a record: big integers as decimal strings and
    hashes as hexadecimal strings.
    """
    return _record_adapter.dump_python(record, mode="json")


def save_record(record: Record, path: Union[str, PathLike]) -> None:
    with open(path, "w", encoding="utf-8") as outfile:
        json.dump(record_to_dict(record), outfile, indent=2)

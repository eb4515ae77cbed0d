"""Value codecs: rendering Python values as SQL literals and decoding them back."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict

ZERO_TIME = datetime.min

BINARY_ENCODING = "latin-1"


def is_zero_time(value: Any) -> bool:
    """Return whether `value` is the zero timestamp (`datetime.min`)."""

    return isinstance(value, datetime) and value.replace(tzinfo=None) == ZERO_TIME


def to_epoch(value: datetime) -> int:
    """Unix epoch seconds of `value`; naive datetimes are taken as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def formatted(item: Any) -> str:
    """Render one value as an inline SQL literal.

    Text and binary values are single-quoted with embedded quotes doubled,
    null and zero timestamps become `null`, timestamps become epoch
    seconds, anything else uses its default text form.
    """

    if item is None:
        return "null"
    if isinstance(item, str):
        return "'" + item.replace("'", "''") + "'"
    if isinstance(item, (bytes, bytearray, memoryview)):
        text = bytes(item).decode(BINARY_ENCODING)
        return "'" + text.replace("'", "''") + "'"
    if isinstance(item, datetime):
        if is_zero_time(item):
            return "null"
        return str(to_epoch(item))
    return str(item)


def field_list(*items: Any) -> str:
    """Render values as a comma separated list of SQL literals."""

    return ", ".join(formatted(item) for item in items)


def as_is(value: Any) -> Any:
    return value


def as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def as_int(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"cannot decode {value!r} as int without loss")
    return int(value)


def as_float(value: Any) -> Any:
    return None if value is None else float(value)


def as_bool(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "t", "true"):
            return True
        if lowered in ("0", "f", "false"):
            return False
        raise ValueError(f"cannot decode {value!r} as bool")
    return bool(value)


def as_bytes(value: Any) -> Any:
    if value is None or isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode(BINARY_ENCODING)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise ValueError(f"cannot decode {type(value).__name__} as bytes")


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _epoch_to_utc(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        if value.lstrip("-").isdigit():
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        return _to_utc(datetime.fromisoformat(value))
    raise ValueError(f"cannot decode {type(value).__name__} as datetime")


def as_datetime(value: Any) -> Any:
    """Decode epoch seconds (or ISO text) into a naive UTC datetime.

    Naive values are written as UTC, so this is the inverse of `formatted`.
    """

    if value is None:
        return None
    return _epoch_to_utc(value).replace(tzinfo=None)


def as_utc_datetime(value: Any) -> Any:
    """Decode epoch seconds (or ISO text) into an aware UTC datetime."""

    if value is None:
        return None
    return _epoch_to_utc(value)


def as_datetime_or_zero(value: Any) -> Any:
    """Like `as_datetime`, with null read back as `ZERO_TIME`."""

    return ZERO_TIME if value is None else as_datetime(value)


def as_utc_datetime_or_zero(value: Any) -> Any:
    """Like `as_utc_datetime`, with null read back as `ZERO_TIME`."""

    return ZERO_TIME if value is None else as_utc_datetime(value)


DECODERS: Dict[str, Callable[[Any], Any]] = {
    "str": as_text,
    "int": as_int,
    "float": as_float,
    "bool": as_bool,
    "bytes": as_bytes,
    "datetime": as_datetime,
}

_DATETIME_DECODERS = {
    (True, False): as_datetime,
    (True, True): as_utc_datetime,
    (False, False): as_datetime_or_zero,
    (False, True): as_utc_datetime_or_zero,
}


def decoder_for(
    type_name: str, *, nullable: bool = True, utc: bool = False
) -> Callable[[Any], Any]:
    """Return the decoder for a base type name, `as_is` when unknown.

    Timestamps decode to naive UTC unless `utc` asks for aware values; a
    column that is not `nullable` reads null back as `ZERO_TIME`.
    """

    if type_name == "datetime":
        return _DATETIME_DECODERS[(nullable, utc)]
    return DECODERS.get(type_name, as_is)

"""
Local validation of keys, options and values.

Every check here mirrors a limit that the edge runtime enforces, so that a request
that would be refused never leaves the machine. All functions raise InvalidArgument
or RequestTooLarge and never perform I/O.
"""

import json
import math
import re
import time
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..config import (
    MAX_EXPIRATION,
    MAX_KEY_SIZE,
    MAX_LIST_KEYS,
    MAX_METADATA_SIZE,
    MAX_VALUE_SIZE,
    MIN_CACHE_TTL,
    MIN_EXPIRATION,
)
from .types import BulkWriteItem, GetOptions, ListOptions, PutOptions, ValueType
from .utils import InvalidArgument, RequestTooLarge

_KEY_TYPE_ERROR = " on 'KvNamespace': parameter 1 is not of type 'string'."
_OPERATION_NAMES = {"GET": "get", "PUT": "put", "DELETE": "delete"}
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalise_int(value: Any) -> Union[int, float, None]:
    """
    Returns value as an integer, or None if it is not a number at all.

    Floats are rounded half up, and strings are parsed as base 10 integers from
    their leading digits. Numbers that cannot be represented as an integer (nan,
    inf, or a string without leading digits) are returned as float nan / inf so
    that callers can tell "not given" apart from "given but invalid".
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return value
        return math.floor(value + 0.5)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else math.nan
    return None


def _is_nan(value: Union[int, float]) -> bool:
    return isinstance(value, float) and math.isnan(value)


def now_seconds() -> int:
    """
    Current unix time in whole seconds.
    """
    return math.floor(time.time() + 0.5)


T = TypeVar("T", bound=BaseModel)


def coerce_options(options: Any, OptionsType: Type[T]) -> T:
    """
    Accepts None, an instance of OptionsType or a mapping of its fields, and
    returns an OptionsType instance.
    """
    if options is None:
        return OptionsType()
    if isinstance(options, OptionsType):
        return options
    if isinstance(options, Mapping):
        try:
            return OptionsType.model_validate(dict(options))
        except ValidationError as e:
            raise InvalidArgument(f"Invalid {OptionsType.__name__}: {e}")
    raise InvalidArgument(
        f"Expected {OptionsType.__name__} or a mapping, got {type(options).__name__}."
    )


def validate_key(method: str, key: Any) -> None:
    """
    Checks that the key is a non-empty string other than "." and "..", and that
    its UTF-8 encoding is at most MAX_KEY_SIZE bytes long.
    """
    if not isinstance(key, str):
        operation = _OPERATION_NAMES.get(method, method.lower())
        raise InvalidArgument(f"Failed to execute '{operation}'{_KEY_TYPE_ERROR}")
    if key == "":
        raise InvalidArgument("Key name cannot be empty.")
    if key == ".":
        raise InvalidArgument('"." is not allowed as a key name.')
    if key == "..":
        raise InvalidArgument('".." is not allowed as a key name.')
    key_length = len(key.encode("utf-8"))
    if key_length > MAX_KEY_SIZE:
        raise RequestTooLarge(
            f"UTF-8 encoded length of {key_length} exceeds key length limit of"
            f" {MAX_KEY_SIZE}.",
            method=method,
            status=414,
        )


def validate_get_options(
    options: Union[str, ValueType, GetOptions, Mapping, None] = None,
) -> ValueType:
    """
    Normalises the requested value type. cache_ttl is only checked against its
    lower bound: there is no cache between the client and the API, so it has no
    other effect.
    """
    if isinstance(options, (str, ValueType)):
        value_type, cache_ttl = options, None
    else:
        opts = coerce_options(options, GetOptions)
        value_type = ValueType.TEXT if opts.type is None else opts.type
        cache_ttl = opts.cache_ttl

    if cache_ttl is not None:
        if (
            isinstance(cache_ttl, bool)
            or not isinstance(cache_ttl, (int, float))
            or math.isnan(cache_ttl)
            or cache_ttl < MIN_CACHE_TTL
        ):
            raise InvalidArgument(
                f"Invalid cache_ttl of {cache_ttl}. Cache TTL must be at least"
                f" {MIN_CACHE_TTL}.",
                method="GET",
                status=400,
            )

    try:
        return ValueType(value_type)
    except ValueError:
        raise InvalidArgument(
            'Unknown response type. Possible types are "text", "bytes", "json",'
            ' and "stream".'
        )


def _check_int32(value: Union[int, float]) -> None:
    # The runtime rejects out of range values before looking at them any further.
    if not _is_nan(value) and (value < MIN_EXPIRATION or value > MAX_EXPIRATION):
        raise InvalidArgument(
            f"Value out of range. Must be between {MIN_EXPIRATION} and"
            f" {MAX_EXPIRATION} (inclusive)."
        )


def _serialise_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"KV put() value is not JSON serializable: {e}")
    raise InvalidArgument(
        "KV put() accepts only strings as values (bytes, bytearray, memoryview and"
        " streams are not supported)."
    )


def _metadata_length(metadata: Any) -> int:
    try:
        serialised = json.dumps(metadata, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"KV put() metadata is not JSON serializable: {e}")
    return len(serialised.encode("utf-8"))


def validate_put(
    key: str,
    value: Any,
    options: Union[PutOptions, Mapping, None] = None,
    now: Optional[int] = None,
) -> BulkWriteItem:
    """
    Validates a put and returns the bulk write entry to send. The key is expected
    to have been validated already.

    Checks run in order: value type, expiration_ttl (or else expiration), value
    size, metadata size. An expiration_ttl is converted into an absolute expiration
    of now + expiration_ttl.
    """
    opts = coerce_options(options, PutOptions)
    stored = _serialise_value(value)

    if now is None:
        now = now_seconds()
    expiration = normalise_int(opts.expiration)
    expiration_ttl = normalise_int(opts.expiration_ttl)
    if expiration_ttl is not None:
        _check_int32(expiration_ttl)
        if _is_nan(expiration_ttl) or expiration_ttl <= 0:
            raise InvalidArgument(
                f"Invalid expiration_ttl of {opts.expiration_ttl}. Please specify"
                " integer greater than 0.",
                method="PUT",
                status=400,
            )
        if expiration_ttl < MIN_CACHE_TTL:
            raise InvalidArgument(
                f"Invalid expiration_ttl of {opts.expiration_ttl}. Expiration TTL"
                f" must be at least {MIN_CACHE_TTL}.",
                method="PUT",
                status=400,
            )
        expiration = now + expiration_ttl
    elif expiration is not None:
        _check_int32(expiration)
        if _is_nan(expiration) or expiration <= now:
            raise InvalidArgument(
                f"Invalid expiration of {opts.expiration}. Please specify integer"
                " greater than the current number of seconds since the UNIX epoch.",
                method="PUT",
                status=400,
            )
        if expiration < now + MIN_CACHE_TTL:
            raise InvalidArgument(
                f"Invalid expiration of {opts.expiration}. Expiration times must be"
                f" at least {MIN_CACHE_TTL} seconds in the future.",
                method="PUT",
                status=400,
            )

    value_length = len(stored.encode("utf-8"))
    if value_length > MAX_VALUE_SIZE:
        raise RequestTooLarge(
            f"Value length of {value_length} exceeds limit of {MAX_VALUE_SIZE}.",
            method="PUT",
            status=413,
        )
    if opts.metadata is not None:
        metadata_length = _metadata_length(opts.metadata)
        if metadata_length > MAX_METADATA_SIZE:
            raise RequestTooLarge(
                f"Metadata length of {metadata_length} exceeds limit of"
                f" {MAX_METADATA_SIZE}.",
                method="PUT",
                status=413,
            )

    return BulkWriteItem(
        key=key,
        value=stored,
        expiration=expiration,
        expiration_ttl=expiration_ttl,
        metadata=opts.metadata,
    )


def validate_list_options(
    options: Union[ListOptions, Mapping, None] = None,
) -> ListOptions:
    """
    Returns a copy of the list options with limit normalised to an integer in
    [1, MAX_LIST_KEYS]. An omitted limit defaults to MAX_LIST_KEYS.
    """
    opts = coerce_options(options, ListOptions)
    limit = normalise_int(opts.limit)
    if limit is None:
        limit = MAX_LIST_KEYS
    if _is_nan(limit) or limit < 1:
        raise InvalidArgument(
            f"Invalid key_count_limit of {opts.limit}. Please specify an integer"
            " greater than 0.",
            method="GET",
            status=400,
        )
    if limit > MAX_LIST_KEYS:
        raise InvalidArgument(
            f"Invalid key_count_limit of {opts.limit}. Please specify an integer"
            f" no greater than {MAX_LIST_KEYS}.",
            method="GET",
            status=400,
        )
    return ListOptions(prefix=opts.prefix or "", limit=limit, cursor=opts.cursor)

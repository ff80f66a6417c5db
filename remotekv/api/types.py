from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional

from ..config import MAX_LIST_KEYS


class ValueType(str, Enum):
    """
    The representation a value is decoded into on read.
    """

    TEXT = "text"
    JSON = "json"
    BYTES = "bytes"
    STREAM = "stream"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "structured": cls.JSON,
            "arrayBuffer": cls.BYTES,
            "raw": cls.BYTES,
        }
        if not isinstance(value, str):
            return None
        return aliases.get(value)


# The option records below are deliberately loose: they only carry what the
# caller passed in, and remotekv.api.validation decides what is acceptable.


class GetOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Any = ValueType.TEXT
    cache_ttl: Optional[Any] = Field(default=None, alias="cacheTtl")


class PutOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    expiration: Optional[Any] = None
    expiration_ttl: Optional[Any] = Field(default=None, alias="expirationTtl")
    metadata: Optional[Any] = None


class ListOptions(BaseModel):
    prefix: Optional[str] = ""
    limit: Optional[Any] = MAX_LIST_KEYS
    cursor: Optional[str] = None


class StoredKey(BaseModel):
    """
    A key as returned by listing. `expiration` is the unix timestamp in seconds
    at which the key expires.
    """

    name: str
    expiration: Optional[int] = None
    metadata: Optional[Any] = None


class ListResult(BaseModel):
    keys: List[StoredKey]
    cursor: str = ""
    list_complete: bool


class ValueWithMetadata(BaseModel):
    value: Optional[Any] = None
    metadata: Optional[Any] = None


class BulkWriteItem(BaseModel):
    """
    One entry of the body sent to the bulk write endpoint.
    """

    key: str
    value: str
    expiration: Optional[int] = None
    expiration_ttl: Optional[int] = None
    metadata: Optional[Any] = None


class ResultInfo(BaseModel):
    count: Optional[int] = None
    cursor: Optional[str] = None


class ListKeysResponse(BaseModel):
    result: List[StoredKey]
    result_info: Optional[ResultInfo] = None


class MetadataResponse(BaseModel):
    result: Optional[Any] = None

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

DISTRIBUTED = "distributed-cache"
REPLICATED = "replicated-cache"
INVALIDATED = "invalidation-cache"
LOCAL = "local-cache"
SCATTERED = "scattered-cache"

UNKNOWN_CACHE_TYPE = "Unknown"


class CacheType(str, Enum):
    DISTRIBUTED = "Distributed"
    REPLICATED = "Replicated"
    LOCAL = "Local"
    INVALIDATED = "Invalidated"
    SCATTERED = "Scattered"


class ContentType(str, Enum):
    """Logical type of a stored key or value, used to (de)serialize it for display."""

    STRING = "String"
    INTEGER = "Integer"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    JSON = "Json"
    XML = "Xml"


SCALAR_CONTENT_TYPES = (
    ContentType.STRING,
    ContentType.INTEGER,
    ContentType.LONG,
    ContentType.FLOAT,
    ContentType.DOUBLE,
    ContentType.BOOLEAN,
)


class EncodingType(str, Enum):
    """Wire encoding declared by a cache for its keys or values."""

    PROTOBUF = "application/x-protostream"
    NATIVE_OBJECT = "application/x-java-object"
    SERIALIZED_OBJECT = "application/x-java-serialized"
    XML = "application/xml; charset=UTF-8"
    JSON = "application/json"
    TEXT = "text/plain"
    PROPRIETARY_BINARY = "application/x-jboss-marshalling"
    EMPTY = "Empty"


class Flags(str, Enum):
    CACHE_MODE_LOCAL = "CACHE_MODE_LOCAL"
    FAIL_SILENTLY = "FAIL_SILENTLY"
    FORCE_ASYNCHRONOUS = "FORCE_ASYNCHRONOUS"
    FORCE_SYNCHRONOUS = "FORCE_SYNCHRONOUS"
    FORCE_WRITE_LOCK = "FORCE_WRITE_LOCK"
    IGNORE_RETURN_VALUES = "IGNORE_RETURN_VALUES"
    IGNORE_TRANSACTION = "IGNORE_TRANSACTION"
    PUT_FOR_EXTERNAL_READ = "PUT_FOR_EXTERNAL_READ"
    REMOTE_ITERATION = "REMOTE_ITERATION"
    SKIP_CACHE_LOAD = "SKIP_CACHE_LOAD"
    SKIP_CACHE_STORE = "SKIP_CACHE_STORE"
    SKIP_INDEX_CLEANUP = "SKIP_INDEX_CLEANUP"
    SKIP_INDEXING = "SKIP_INDEXING"
    SKIP_LISTENER_NOTIFICATION = "SKIP_LISTENER_NOTIFICATION"
    SKIP_LOCKING = "SKIP_LOCKING"
    SKIP_OWNERSHIP_CHECK = "SKIP_OWNERSHIP_CHECK"
    SKIP_REMOTE_LOOKUP = "SKIP_REMOTE_LOOKUP"
    SKIP_SHARED_CACHE_STORE = "SKIP_SHARED_CACHE_STORE"
    SKIP_SIZE_OPTIMIZATION = "SKIP_SIZE_OPTIMIZATION"
    SKIP_STATISTICS = "SKIP_STATISTICS"
    SKIP_XSITE_BACKUP = "SKIP_XSITE_BACKUP"
    ZERO_LOCK_ACQUISITION_TIMEOUT = "ZERO_LOCK_ACQUISITION_TIMEOUT"


@dataclass(frozen=True)
class CacheEncoding:
    key: EncodingType = EncodingType.EMPTY
    value: EncodingType = EncodingType.EMPTY


@dataclass
class ActionResponse:
    """Outcome of a call, reported to the caller instead of raising."""

    message: str
    success: bool


@dataclass
class ServiceCall:
    url: str
    success_message: str
    error_message: str
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None


@dataclass
class CacheEntry:
    key: str
    value: str
    key_content_type: Optional[ContentType] = None
    value_content_type: Optional[ContentType] = None
    time_to_live: Optional[str] = None
    max_idle: Optional[str] = None
    created: Optional[str] = None
    last_used: Optional[str] = None
    last_modified: Optional[str] = None
    expires: Optional[str] = None
    cache_control: Optional[str] = None
    etag: Optional[str] = None


@dataclass
class CacheStats:
    enabled: Optional[bool] = None
    misses: Optional[int] = None
    time_since_start: Optional[int] = None
    time_since_reset: Optional[int] = None
    hits: Optional[int] = None
    current_number_of_entries: Optional[int] = None
    current_number_of_entries_in_memory: Optional[int] = None
    total_number_of_entries: Optional[int] = None
    stores: Optional[int] = None
    off_heap_memory_used: Optional[int] = None
    data_memory_used: Optional[int] = None
    retrievals: Optional[int] = None
    remove_hits: Optional[int] = None
    remove_misses: Optional[int] = None
    evictions: Optional[int] = None
    average_read_time: Optional[int] = None
    average_read_time_nanos: Optional[int] = None
    average_write_time: Optional[int] = None
    average_write_time_nanos: Optional[int] = None
    average_remove_time: Optional[int] = None
    average_remove_time_nanos: Optional[int] = None
    required_minimum_number_of_nodes: Optional[int] = None


@dataclass
class Features:
    bounded: bool = False
    indexed: bool = False
    persistent: bool = False
    transactional: bool = False
    secured: bool = False
    has_remote_backup: bool = False


@dataclass
class CacheConfig:
    name: str
    config: str


@dataclass
class DetailedInfinispanCache:
    name: str
    started: bool
    type: str
    encoding: CacheEncoding
    editable: bool
    configuration: CacheConfig
    size: Optional[int] = None
    rehash_in_progress: bool = False
    indexing_in_progress: bool = False
    queryable: bool = False
    features: Features = field(default_factory=Features)
    stats: Optional[CacheStats] = None

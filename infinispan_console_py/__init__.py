from .auth import SessionStorageTokenProvider, StaticTokenProvider, TokenProvider
from .cache_service import CacheService, parse_metadata_date, parse_metadata_number
from .either import Either, Left, Right
from .encoding import (
    extract_value_from_protobuf_value_content,
    from_content_type,
    from_protobuf_type,
    get_content_type_options,
    is_editable,
    is_json_object,
    is_protobuf_basic_type,
    map_cache_type,
    map_encoding,
    to_content_type,
    to_encoding,
)
from .errors import (
    CacheConfigurationError,
    CacheConnectionError,
    CacheError,
    CacheHttpError,
    CacheUnauthorizedError,
    CacheValidationError,
    map_error,
)
from .models import (
    ActionResponse,
    CacheConfig,
    CacheEncoding,
    CacheEntry,
    CacheStats,
    CacheType,
    ContentType,
    DetailedInfinispanCache,
    EncodingType,
    Features,
    Flags,
    ServiceCall,
)
from .rest import RestClient

__all__ = [
    'RestClient',
    'CacheService',
    'TokenProvider',
    'StaticTokenProvider',
    'SessionStorageTokenProvider',
    'Either',
    'Left',
    'Right',
    'ActionResponse',
    'CacheConfig',
    'CacheEncoding',
    'CacheEntry',
    'CacheStats',
    'CacheType',
    'ContentType',
    'DetailedInfinispanCache',
    'EncodingType',
    'Features',
    'Flags',
    'ServiceCall',
    'map_encoding',
    'map_cache_type',
    'to_encoding',
    'is_editable',
    'get_content_type_options',
    'from_protobuf_type',
    'is_protobuf_basic_type',
    'to_content_type',
    'from_content_type',
    'is_json_object',
    'extract_value_from_protobuf_value_content',
    'parse_metadata_number',
    'parse_metadata_date',
    'map_error',
    'CacheError',
    'CacheConnectionError',
    'CacheValidationError',
    'CacheConfigurationError',
    'CacheHttpError',
    'CacheUnauthorizedError',
]

import json
import logging
from typing import Any, List, Mapping, Optional, Union

from google.protobuf.descriptor_pb2 import FieldDescriptorProto

from .errors import CacheConfigurationError
from .models import (
    DISTRIBUTED,
    INVALIDATED,
    LOCAL,
    REPLICATED,
    SCALAR_CONTENT_TYPES,
    SCATTERED,
    UNKNOWN_CACHE_TYPE,
    CacheEncoding,
    CacheType,
    ContentType,
    EncodingType,
)

logger = logging.getLogger(__name__)

JAVA_OBJECT_PREFIX = "application/x-java-object;type=java.lang."
JSON_MEDIA_TYPE = "application/json"
XML_MEDIA_TYPE = "application/xml"

_TOPOLOGY_SECTIONS = (DISTRIBUTED, REPLICATED, INVALIDATED, LOCAL, SCATTERED)

_CACHE_TYPE_LABELS = (
    (DISTRIBUTED, CacheType.DISTRIBUTED),
    (REPLICATED, CacheType.REPLICATED),
    (LOCAL, CacheType.LOCAL),
    (INVALIDATED, CacheType.INVALIDATED),
    (SCATTERED, CacheType.SCATTERED),
)

# Substring checks, first match wins.
_MEDIA_TYPE_MARKERS = (
    ("protostream", EncodingType.PROTOBUF),
    ("java-object", EncodingType.NATIVE_OBJECT),
    ("java-serialized", EncodingType.SERIALIZED_OBJECT),
    ("jboss", EncodingType.PROPRIETARY_BINARY),
    ("text", EncodingType.TEXT),
    ("xml", EncodingType.XML),
    ("json", EncodingType.JSON),
)

_BINARY_ENCODINGS = (
    EncodingType.PROTOBUF,
    EncodingType.NATIVE_OBJECT,
    EncodingType.SERIALIZED_OBJECT,
    EncodingType.PROPRIETARY_BINARY,
)

_PROTOBUF_CONTENT_TYPES = {
    FieldDescriptorProto.TYPE_STRING: ContentType.STRING,
    FieldDescriptorProto.TYPE_FLOAT: ContentType.FLOAT,
    FieldDescriptorProto.TYPE_DOUBLE: ContentType.DOUBLE,
    FieldDescriptorProto.TYPE_INT32: ContentType.INTEGER,
    FieldDescriptorProto.TYPE_UINT32: ContentType.INTEGER,
    FieldDescriptorProto.TYPE_SINT32: ContentType.INTEGER,
    FieldDescriptorProto.TYPE_FIXED32: ContentType.INTEGER,
    FieldDescriptorProto.TYPE_SFIXED32: ContentType.INTEGER,
    FieldDescriptorProto.TYPE_INT64: ContentType.LONG,
    FieldDescriptorProto.TYPE_UINT64: ContentType.LONG,
    FieldDescriptorProto.TYPE_SINT64: ContentType.LONG,
    FieldDescriptorProto.TYPE_FIXED64: ContentType.LONG,
    FieldDescriptorProto.TYPE_SFIXED64: ContentType.LONG,
    FieldDescriptorProto.TYPE_BOOL: ContentType.BOOLEAN,
}

_NON_SCALAR_PROTOBUF_TYPES = (
    FieldDescriptorProto.TYPE_GROUP,
    FieldDescriptorProto.TYPE_MESSAGE,
    FieldDescriptorProto.TYPE_ENUM,
)


def _topology_section(config: Mapping[str, Any]) -> Mapping[str, Any]:
    for section in _TOPOLOGY_SECTIONS:
        if section in config:
            head = config[section]
            return head if isinstance(head, Mapping) else {}
    raise CacheConfigurationError("The configuration of the cache is not correct")


def _media_type(encoding_side: Any) -> Optional[str]:
    if isinstance(encoding_side, Mapping):
        return encoding_side.get("media-type")
    return None


def to_encoding(media_type: Optional[str]) -> EncodingType:
    """Resolve a media-type string to the closest EncodingType, EMPTY if none matches."""
    if not media_type:
        return EncodingType.EMPTY
    for marker, encoding in _MEDIA_TYPE_MARKERS:
        if marker in media_type:
            return encoding
    return EncodingType.EMPTY


def map_encoding(config: Mapping[str, Any]) -> CacheEncoding:
    """
    Read the key/value encoding declared in a cache configuration document.

    Args:
        config: Parsed configuration, keyed by its topology section

    Returns:
        CacheEncoding, EMPTY on both sides when no encoding is declared

    Raises:
        CacheConfigurationError: If no known topology section is present
    """
    section = _topology_section(config)
    encoding = section.get("encoding")
    if not isinstance(encoding, Mapping):
        return CacheEncoding(key=EncodingType.EMPTY, value=EncodingType.EMPTY)

    return CacheEncoding(
        key=to_encoding(_media_type(encoding.get("key"))),
        value=to_encoding(_media_type(encoding.get("value"))),
    )


def map_cache_type(config: Union[Mapping[str, Any], str]) -> str:
    """Display label for a configuration document or a topology label."""
    for section, cache_type in _CACHE_TYPE_LABELS:
        if isinstance(config, str):
            if config == section:
                return cache_type.value
        elif section in config:
            return cache_type.value
    return UNKNOWN_CACHE_TYPE


def is_editable(encoding: EncodingType) -> bool:
    return encoding != EncodingType.EMPTY


def get_content_type_options(encoding: EncodingType) -> List[ContentType]:
    if encoding in _BINARY_ENCODINGS:
        return [*SCALAR_CONTENT_TYPES, ContentType.JSON]
    if encoding == EncodingType.XML:
        return [ContentType.XML]
    if encoding == EncodingType.JSON:
        return [ContentType.JSON]
    if encoding == EncodingType.TEXT:
        return [ContentType.STRING, ContentType.JSON]
    return []


def _protobuf_field_type(type_name: Optional[str]) -> Optional[int]:
    if not isinstance(type_name, str) or not type_name:
        return None
    try:
        return FieldDescriptorProto.Type.Value("TYPE_" + type_name.upper())
    except ValueError:
        return None


def is_protobuf_basic_type(type_name: Optional[str]) -> bool:
    """True for protobuf scalar names (int32, string, bytes, ...), False for message types."""
    field_type = _protobuf_field_type(type_name)
    return field_type is not None and field_type not in _NON_SCALAR_PROTOBUF_TYPES


def from_protobuf_type(type_name: Optional[str]) -> ContentType:
    field_type = _protobuf_field_type(type_name)
    return _PROTOBUF_CONTENT_TYPES.get(field_type, ContentType.STRING)


def to_content_type(
    header: Optional[str],
    default: Optional[ContentType] = None,
) -> ContentType:
    """
    Translate a media-type header into a ContentType.

    Args:
        header: Header value, e.g. ``application/x-java-object;type=java.lang.Integer``
        default: Returned when the header is missing or not recognized

    Returns:
        The matching ContentType, ``default`` or STRING
    """
    fallback = default or ContentType.STRING
    if header is None:
        return fallback

    if header.startswith(JAVA_OBJECT_PREFIX):
        type_name = header[len(JAVA_OBJECT_PREFIX) :]
        try:
            return ContentType(type_name)
        except ValueError:
            logger.debug("Unknown java type in content type header: %s", header)
            return fallback

    if header == JSON_MEDIA_TYPE:
        return ContentType.JSON
    if header == XML_MEDIA_TYPE:
        return ContentType.XML

    return fallback


def from_content_type(content_type: Optional[ContentType]) -> str:
    """Media-type header for a ContentType; empty string when it cannot be mapped."""
    if content_type in SCALAR_CONTENT_TYPES:
        return JAVA_OBJECT_PREFIX + ContentType(content_type).value
    if content_type == ContentType.JSON:
        return JSON_MEDIA_TYPE
    if content_type == ContentType.XML:
        return XML_MEDIA_TYPE

    logger.warning("Content type not mapped %s", content_type)
    return ""


def is_json_object(text: Any) -> bool:
    if not isinstance(text, (str, bytes, bytearray)):
        return False
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def extract_value_from_protobuf_value_content(maybe_json: str) -> str:
    try:
        parsed = json.loads(maybe_json)
    except (TypeError, ValueError, RecursionError):
        return maybe_json
    if isinstance(parsed, dict) and parsed.get("_type") and parsed.get("_value"):
        return json.dumps(parsed["_value"])
    return maybe_json

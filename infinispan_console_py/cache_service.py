import asyncio
import json
import logging
from dataclasses import fields
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

import aiohttp

from .either import Either, Left, Right
from .encoding import (
    from_content_type,
    from_protobuf_type,
    get_content_type_options,
    is_editable,
    is_json_object,
    is_protobuf_basic_type,
    map_cache_type,
    map_encoding,
)
from .errors import CacheError, map_error
from .models import (
    ActionResponse,
    CacheConfig,
    CacheEncoding,
    CacheEntry,
    CacheStats,
    ContentType,
    DetailedInfinispanCache,
    EncodingType,
    Features,
    Flags,
    ServiceCall,
)
from .rest import RestClient

_STATS_FIELDS = tuple(f.name for f in fields(CacheStats) if f.name != "enabled")


def encode_uri_component(value: Any) -> str:
    return quote(str(value), safe="!~*'()")


def looks_like_json(text: Any) -> bool:
    """True when ``text`` holds a JSON object or array, not a bare scalar."""
    if isinstance(text, (dict, list)):
        return True
    if not isinstance(text, (str, bytes, bytearray)):
        return False
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return False
    return isinstance(parsed, (dict, list))


def _is_unset(metadata: Any) -> bool:
    return not metadata or metadata == -1 or metadata == "-1"


def parse_metadata_number(metadata: Union[int, str, None]) -> Optional[str]:
    """Format a numeric metadata field with thousands separators, None when unset."""
    if _is_unset(metadata):
        return None
    try:
        number = int(metadata)
    except (TypeError, ValueError):
        return None
    return f"{number:,}"


def parse_metadata_date(metadata: Union[int, str, None]) -> Optional[str]:
    """Format an epoch-millis metadata field as a local date string, None when unset."""
    if _is_unset(metadata):
        return None
    try:
        millis = int(metadata)
        return datetime.fromtimestamp(millis / 1000).strftime("%c")
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _http_date_to_millis(header: Optional[str]) -> Optional[int]:
    if not header:
        return None
    try:
        return int(parsedate_to_datetime(header).timestamp() * 1000)
    except (TypeError, ValueError, IndexError):
        return None


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


class CacheService:
    """
    Cache related calls to the data grid REST API.

    Every operation returns either an ActionResponse (mutations) or an
    Either of ActionResponse and the requested value (reads).
    """

    def __init__(
        self,
        rest_client: RestClient,
        endpoint: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.utils = rest_client
        self.endpoint = (endpoint or rest_client.endpoint).rstrip("/")
        self.logger = logger or logging.getLogger(__name__)

    def _cache_url(self, cache_name: str) -> str:
        return f"{self.endpoint}/caches/{encode_uri_component(cache_name)}"

    def _entry_url(self, cache_name: str, key: str) -> str:
        return f"{self._cache_url(cache_name)}/{encode_uri_component(key)}"

    def _ignored_cache_url(self, cache_manager: str, cache_name: str) -> str:
        return (
            f"{self.endpoint}/server/ignored-caches/"
            f"{encode_uri_component(cache_manager)}/{encode_uri_component(cache_name)}"
        )

    async def retrieve_full_detail(
        self, cache_name: str
    ) -> Either[ActionResponse, DetailedInfinispanCache]:
        """Everything the cache detail view shows, in a single GET."""
        self.logger.debug("Retrieving details of cache %s", cache_name)
        return await self.utils.get(
            self._cache_url(cache_name),
            lambda data: self._to_detailed_cache(cache_name, data),
            error_message=f"Cannot retrieve details of cache {cache_name}",
        )

    def _to_detailed_cache(self, cache_name: str, data: Mapping[str, Any]) -> DetailedInfinispanCache:
        configuration = data["configuration"]
        encoding = map_encoding(configuration)

        stats = None
        raw_stats = data.get("stats")
        if raw_stats and isinstance(raw_stats, Mapping):
            stats = CacheStats(
                enabled=data.get("statistics"),
                **{name: raw_stats.get(name) for name in _STATS_FIELDS},
            )

        return DetailedInfinispanCache(
            name=cache_name,
            started=True,
            type=map_cache_type(configuration),
            encoding=encoding,
            size=data.get("size"),
            rehash_in_progress=bool(data.get("rehash_in_progress")),
            indexing_in_progress=bool(data.get("indexing_in_progress")),
            editable=is_editable(encoding.value),
            queryable=bool(data.get("queryable")),
            features=Features(
                bounded=bool(data.get("bounded")),
                indexed=bool(data.get("indexed")),
                persistent=bool(data.get("persistent")),
                transactional=bool(data.get("transactional")),
                secured=bool(data.get("secured")),
                has_remote_backup=bool(data.get("has_remote_backup")),
            ),
            configuration=CacheConfig(
                name=cache_name,
                config=json.dumps(configuration, indent=2),
            ),
            stats=stats,
        )

    async def create_cache_by_config_name(self, cache_name: str, config_name: str) -> ActionResponse:
        """Create a cache from a template already present in the server."""
        url = f"{self._cache_url(cache_name)}?template={encode_uri_component(config_name)}"
        return await self.utils.post(
            ServiceCall(
                url=url,
                success_message=f"Cache {cache_name} successfully created with {config_name}.",
                error_message=f"Unexpected error when creating cache {config_name}.",
            )
        )

    async def create_cache_with_configuration(self, cache_name: str, config: str) -> ActionResponse:
        """
        Create a cache with the configuration provided.

        Args:
            cache_name: The cache name
            config: Configuration body, JSON or XML

        Returns:
            ActionResponse
        """
        content_type = ContentType.JSON if is_json_object(config) else ContentType.XML
        headers = self.utils.create_authenticated_header()
        headers["Content-Type"] = from_content_type(content_type)

        return await self.utils.post(
            ServiceCall(
                url=self._cache_url(cache_name),
                success_message=f"Cache {cache_name} created with the provided configuration.",
                error_message="Unexpected error creating the cache with the provided configuration.",
                headers=headers,
                body=config,
            )
        )

    async def delete_cache(self, cache_name: str) -> ActionResponse:
        return await self.utils.delete(
            ServiceCall(
                url=self._cache_url(cache_name),
                success_message=f"Cache {cache_name} deleted.",
                error_message=f"Unexpected error deleting cache {cache_name}.",
            )
        )

    async def ignore_cache(self, cache_manager: str, cache_name: str) -> ActionResponse:
        """Hide a cache from the console."""
        return await self.utils.post(
            ServiceCall(
                url=self._ignored_cache_url(cache_manager, cache_name),
                success_message=f"Cache {cache_name} hidden.",
                error_message=f"Unexpected error hiding cache {cache_name}.",
            )
        )

    async def undo_ignore_cache(self, cache_manager: str, cache_name: str) -> ActionResponse:
        return await self.utils.delete(
            ServiceCall(
                url=self._ignored_cache_url(cache_manager, cache_name),
                success_message=f"Cache {cache_name} is now visible.",
                error_message=f"Unexpected error making cache {cache_name} visible again.",
            )
        )

    async def clear(self, cache_name: str) -> ActionResponse:
        return await self.utils.post(
            ServiceCall(
                url=f"{self._cache_url(cache_name)}?action=clear",
                success_message=f"Cache {cache_name} cleared.",
                error_message=f"Unexpected error when clearing the cache {cache_name}.",
            )
        )

    async def create_or_update(
        self,
        cache_name: str,
        key: str,
        key_content_type: Optional[ContentType],
        value: str,
        value_content_type: Optional[ContentType],
        max_idle: Union[str, int, None] = "",
        time_to_live: Union[str, int, None] = "",
        flags: Optional[Iterable[Union[Flags, str]]] = None,
        create: bool = True,
    ) -> ActionResponse:
        """
        Add or update an entry.

        Args:
            cache_name: The cache name
            key: Entry key
            key_content_type: Key type, detected from the key when None
            value: Entry value
            value_content_type: Value type; a String value holding a JSON
                document is sent as JSON
            max_idle: Max idle seconds, omitted when empty
            time_to_live: Lifespan seconds, omitted when empty
            flags: Per-request flags
            create: POST a new entry when True, PUT over an existing one otherwise

        Returns:
            ActionResponse
        """
        headers = self.utils.create_authenticated_header()
        if key_content_type:
            headers["Key-Content-Type"] = from_content_type(key_content_type)
        elif looks_like_json(key):
            headers["Key-Content-Type"] = from_content_type(ContentType.JSON)

        if looks_like_json(value) and value_content_type == ContentType.STRING:
            content_type = from_content_type(ContentType.JSON)
        elif value_content_type:
            content_type = from_content_type(value_content_type)
        else:
            content_type = from_content_type(ContentType.STRING)
        headers["Content-Type"] = content_type

        if time_to_live not in (None, ""):
            headers["timeToLiveSeconds"] = str(time_to_live)
        if max_idle not in (None, ""):
            headers["maxIdleTimeSeconds"] = str(max_idle)
        flag_names = [f.value if isinstance(f, Flags) else str(f) for f in flags or ()]
        if flag_names:
            headers["flags"] = ",".join(flag_names)

        url = self._entry_url(cache_name, key)
        self.logger.debug("%s entry in cache %s", "Creating" if create else "Updating", cache_name)
        if create:
            return await self.utils.post(
                ServiceCall(
                    url=url,
                    success_message=f"Entry added to cache {cache_name}.",
                    error_message=f"Unexpected error creating an entry in cache {cache_name}.",
                    headers=headers,
                    body=value,
                )
            )
        return await self.utils.put(
            ServiceCall(
                url=url,
                success_message=f"Entry updated in cache {cache_name}.",
                error_message=f"Unexpected error updating an entry in cache {cache_name}.",
                headers=headers,
                body=value,
            )
        )

    async def get_entries(
        self,
        cache_name: str,
        encoding: CacheEncoding,
        limit: Union[int, str],
    ) -> Either[ActionResponse, List[CacheEntry]]:
        """List up to ``limit`` entries with their metadata."""
        url = (
            f"{self._cache_url(cache_name)}"
            f"?action=entries&content-negotiation=true&metadata=true&limit={limit}"
        )
        return await self.utils.get(
            url,
            lambda entries: [self._to_listed_entry(entry, encoding) for entry in entries],
            error_message=f"An error occurred retrieving entries from {cache_name}",
        )

    def _to_listed_entry(self, entry: Mapping[str, Any], encoding: CacheEncoding) -> CacheEntry:
        key_protobuf = encoding.key == EncodingType.PROTOBUF
        value_protobuf = encoding.value == EncodingType.PROTOBUF
        raw_key = entry["key"]
        raw_value = entry.get("value")
        return CacheEntry(
            key=self._extract_key(raw_key, key_protobuf),
            key_content_type=(
                self._protobuf_content_type(raw_key)
                if key_protobuf
                else self._default_content_type(encoding.key)
            ),
            value=self._extract_value(raw_value, value_protobuf),
            value_content_type=(
                self._protobuf_content_type(raw_value)
                if value_protobuf
                else self._default_content_type(encoding.value)
            ),
            time_to_live=parse_metadata_number(entry.get("timeToLiveSeconds")),
            max_idle=parse_metadata_number(entry.get("maxIdleTimeSeconds")),
            created=parse_metadata_date(entry.get("created")),
            last_used=parse_metadata_date(entry.get("lastUsed")),
            expires=parse_metadata_date(entry.get("expireTime")),
        )

    @staticmethod
    def _protobuf_content_type(raw: Any) -> ContentType:
        if not isinstance(raw, Mapping):
            return ContentType.STRING
        type_name = raw.get("_type")
        if is_protobuf_basic_type(type_name):
            return from_protobuf_type(type_name)
        # Message types travel as JSON carrying their _type.
        return ContentType.JSON

    @staticmethod
    def _default_content_type(encoding: EncodingType) -> Optional[ContentType]:
        options = get_content_type_options(encoding)
        if not options:
            return None
        if ContentType.STRING in options:
            return ContentType.STRING
        return options[0]

    @staticmethod
    def _extract_key(key: Any, protobuf_key: bool) -> str:
        if protobuf_key and isinstance(key, Mapping):
            if "_value" not in key:
                return json.dumps(key)
            key_value = key["_value"]
            if looks_like_json(key_value) and not is_protobuf_basic_type(key.get("_type")):
                return json.dumps(key_value)
            return _stringify(key_value)
        return _stringify(key)

    @staticmethod
    def _extract_value(value: Any, protobuf_value: bool) -> str:
        if (
            protobuf_value
            and isinstance(value, Mapping)
            and "_value" in value
            and is_protobuf_basic_type(value.get("_type"))
        ):
            return _stringify(value["_value"])
        return _stringify(value)

    async def get_entry(
        self,
        cache_name: str,
        key: str,
        key_content_type: Optional[ContentType] = None,
    ) -> Either[ActionResponse, CacheEntry]:
        """
        Get an entry by key.

        A missing key is not an error: the Left carries a successful
        ActionResponse saying the entry does not exist.
        """
        headers = self.utils.create_authenticated_header()
        if key_content_type:
            headers["Key-Content-Type"] = from_content_type(key_content_type)
            headers["Content-Type"] = from_content_type(ContentType.JSON)

        try:
            response = await self.utils.rest_call(self._entry_url(cache_name, key), "GET", headers)
            if response.status == 404:
                await response.text(errors="replace")
                return Left(
                    ActionResponse(message=f"The entry key {key} does not exist.", success=True)
                )
            await self.utils.raise_for_status(response)
            value = await response.text(errors="replace")
        except asyncio.CancelledError:
            raise
        except (CacheError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning("Reading key %s from cache %s failed: %s", key, cache_name, e)
            return Left(map_error(e, f"An error occurred retrieving key {key}"))

        value_content_type = ContentType.STRING
        if not _is_number(value) and looks_like_json(value):
            value_content_type = ContentType.JSON

        response_headers = response.headers
        return Right(
            CacheEntry(
                key=key,
                value=value,
                key_content_type=key_content_type,
                value_content_type=value_content_type,
                time_to_live=parse_metadata_number(response_headers.get("timeToLiveSeconds")),
                max_idle=parse_metadata_number(response_headers.get("maxIdleTimeSeconds")),
                created=parse_metadata_date(response_headers.get("created")),
                last_used=parse_metadata_date(response_headers.get("lastUsed")),
                last_modified=parse_metadata_date(
                    _http_date_to_millis(response_headers.get("Last-Modified"))
                ),
                expires=parse_metadata_date(_http_date_to_millis(response_headers.get("Expires"))),
                cache_control=response_headers.get("Cache-Control"),
                etag=response_headers.get("Etag"),
            )
        )

    async def delete_entry(
        self,
        cache_name: str,
        entry_key: str,
        key_content_type: ContentType,
    ) -> ActionResponse:
        headers = self.utils.create_authenticated_header()
        headers["Key-Content-Type"] = from_content_type(key_content_type)

        return await self.utils.delete(
            ServiceCall(
                url=self._entry_url(cache_name, entry_key),
                success_message=f"Entry {entry_key} deleted.",
                error_message="Unexpected error deleting the entry.",
                headers=headers,
            )
        )

    async def get_configuration(self, cache_name: str) -> Either[ActionResponse, CacheConfig]:
        return await self.utils.get(
            f"{self._cache_url(cache_name)}?action=config",
            lambda data: CacheConfig(name=cache_name, config=json.dumps(data, indent=2)),
            error_message=f"Cannot retrieve configuration for cache {cache_name}",
        )

    async def get_size(self, cache_name: str) -> Either[ActionResponse, int]:
        result = await self.utils.get(
            f"{self._cache_url(cache_name)}?action=size",
            lambda text: text,
            as_text=True,
            error_message=f"Cannot get size for cache {cache_name}",
        )
        if isinstance(result, Left):
            return result

        try:
            return Right(int(result.value.strip()))
        except ValueError:
            return Left(
                ActionResponse(
                    message=f"Size of cache {cache_name} is not a number :{result.value}",
                    success=False,
                )
            )

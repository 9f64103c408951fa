from typing import Tuple

from .errors import CacheValidationError

DEFAULT_PORT = 11222
DEFAULT_BASE_PATH = "/rest/v2"


def parse_endpoint(endpoint: str, use_ssl: bool = False) -> Tuple[str, int, bool, str]:
    """Split an endpoint into ``(host, port, use_ssl, base_path)``."""
    address = endpoint.strip()
    if not address:
        raise CacheValidationError("Endpoint cannot be empty")

    if address.startswith("http://"):
        address = address[len("http://") :]
        use_ssl = False
    elif address.startswith("https://"):
        address = address[len("https://") :]
        use_ssl = True

    base_path = DEFAULT_BASE_PATH
    slash = address.find("/")
    if slash != -1:
        path = address[slash:].rstrip("/")
        address = address[:slash]
        if path:
            base_path = path

    try:
        if address.startswith("["):
            bracket_end = address.find("]")
            if bracket_end == -1:
                raise CacheValidationError("Invalid IPv6 endpoint")
            host = address[1:bracket_end]
            port_part = address[bracket_end + 1 :]
            if not port_part:
                port = DEFAULT_PORT
            elif port_part.startswith(":"):
                port = int(port_part[1:])
            else:
                raise CacheValidationError("Invalid IPv6 endpoint")
        else:
            if ":" in address:
                host, port_part = address.rsplit(":", 1)
                port = int(port_part)
            else:
                host = address
                port = DEFAULT_PORT
    except ValueError as exc:
        raise CacheValidationError(f"Invalid endpoint port in {endpoint!r}") from exc

    if not host:
        raise CacheValidationError("Endpoint host cannot be empty")
    if not (1 <= port <= 65535):
        raise CacheValidationError("Endpoint port must be between 1 and 65535")

    return host, port, use_ssl, base_path


def build_base_url(host: str, port: int, use_ssl: bool, base_path: str) -> str:
    scheme = "https" if use_ssl else "http"
    if ":" in host:
        host = f"[{host}]"
    return f"{scheme}://{host}:{port}{base_path}"

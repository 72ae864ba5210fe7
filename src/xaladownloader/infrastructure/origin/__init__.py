from .discovery import OriginDiscovery, extract_origin, rewrite_to_api_host
from .service import OriginService

__all__ = ["OriginDiscovery", "OriginService", "extract_origin", "rewrite_to_api_host"]

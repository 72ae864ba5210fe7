from .origin import OriginProviderPort, SettingsStorePort
from .schema_adapter import SchemaAdapterPort
from .upstream import UpstreamGatewayPort

__all__ = [
    "OriginProviderPort",
    "SchemaAdapterPort",
    "SettingsStorePort",
    "UpstreamGatewayPort",
]

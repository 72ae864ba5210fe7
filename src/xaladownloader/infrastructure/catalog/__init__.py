from .adapters import create_adapter
from .upstream import HttpxUpstreamGateway

__all__ = ["HttpxUpstreamGateway", "create_adapter"]

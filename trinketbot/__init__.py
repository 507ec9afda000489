"""trinketbot: marketplace listing bot for a community forum."""

from .config import TrinketConfig, load_config
from .contracts import GatewayFrame, InteractionEvent, InteractionKind, ListingDraft
from .dispatch import EventDispatcher
from .gateway import ConnectionState, GatewayClient
from .listing import ListingPublisher, TagCatalog
from .persistence import get_store
from .transports import get_rest_client, get_transport
from .workflow import MarketplaceWorkflow

__version__ = "0.1.0"
__all__ = [
    "ConnectionState",
    "EventDispatcher",
    "GatewayClient",
    "GatewayFrame",
    "InteractionEvent",
    "InteractionKind",
    "ListingDraft",
    "ListingPublisher",
    "MarketplaceWorkflow",
    "TagCatalog",
    "TrinketConfig",
    "get_rest_client",
    "get_store",
    "get_transport",
    "load_config",
]

from __future__ import annotations

import os
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class GatewayConfig(BaseModel):
    """Settings for the live gateway connection."""

    url: str = "wss://gateway.discord.gg/?v=10&encoding=json"
    intents: int = 1
    reconnect_delay: float = 5.0
    backend: Literal["websocket", "inmemory"] = "websocket"


class RestConfig(BaseModel):
    """Settings for request/response calls."""

    base_url: str = "https://discord.com/api/v10"
    timeout: float = 15.0


class MarketplaceConfig(BaseModel):
    """Listing workflow settings."""

    forum_id: str = "1466105963621777572"
    panel_channel_id: str = "1467358343981961247"
    tag_ids: List[str] = Field(
        default_factory=lambda: [
            "1466283217496707072", "1466283356701331642", "1466283393732837602",
            "1466283407695806808", "1466283426075115583", "1466283469452873730",
            "1466283480735420488", "1466283506467602472", "1466283529175437364",
            "1466283544480448552", "1466283590080794867", "1466283603565482118",
            "1466283716371288136", "1466283732221820938", "1466283816078278731",
            "1466704594510811270", "1474194075220443166",
        ]
    )
    cooldown_days: int = 14
    max_items: int = 10
    max_tags: int = 5
    max_photos: int = 10
    session_ttl: float = 1800.0


class IsoConfig(BaseModel):
    """ISO board settings."""

    forum_id: str = "1466146126330597591"
    thread_ids: List[str] = Field(
        default_factory=lambda: [
            "1466683002028560498", "1466982282106769451", "1466706222693482597",
            "1466700846166310945", "1466699623082102872", "1466698761844687062",
            "1466696231425413319", "1466693473804746897", "1466692748508794921",
            "1466690531840102440", "1466688832471826569", "1466686206116102429",
        ]
    )
    bump_cooldown_hours: int = 72
    max_photos: int = 5


class TrinketConfig(BaseModel):
    """Top-level configuration model."""

    token: Optional[str] = None
    admin_role_id: str = "1465161088814289089"
    bot_role_id: str = "1465163793934848194"
    gateway: GatewayConfig = GatewayConfig()
    rest: RestConfig = RestConfig()
    marketplace: MarketplaceConfig = MarketplaceConfig()
    iso: IsoConfig = IsoConfig()
    database_url: Optional[str] = None


def load_config(path: Optional[str] = None) -> TrinketConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to TRINKETBOT_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("TRINKETBOT_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = TrinketConfig(**data)
    else:
        config = TrinketConfig()

    env_token = os.getenv("MARKETPLACE_TOKEN")
    if env_token:
        config.token = env_token
    env_db_url = os.getenv("TRINKETBOT_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config

"""
Game rule configuration and validation.
"""

import os

from pydantic import BaseModel, Field, field_validator


class RuleConfig(BaseModel):
    """Configuration for game rules and room housekeeping."""

    min_players: int = Field(
        default=2,
        ge=2,
        le=10,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=10,
        ge=2,
        le=10,
        description="Maximum number of players allowed in a room"
    )
    hand_size: int = Field(
        default=7,
        ge=1,
        description="Cards dealt to each player before the guaranteed defuse"
    )
    max_log_entries: int = Field(
        default=50,
        ge=1,
        description="Number of game log entries kept per room"
    )
    future_peek_count: int = Field(
        default=3,
        ge=1,
        description="Cards revealed by See the Future / Alter the Future"
    )
    default_extra_defuses: int = Field(
        default=0,
        ge=0,
        description="Extra defuse cards shuffled into the draw pile"
    )
    ended_room_grace_seconds: int = Field(
        default=30 * 60,
        ge=0,
        description="How long a finished game is kept around"
    )
    idle_room_seconds: int = Field(
        default=3 * 24 * 60 * 60,
        ge=60,
        description="Rooms without activity for this long are removed"
    )
    lobby_disconnect_grace_seconds: float = Field(
        default=30,
        ge=0,
        description="Delay before a disconnected lobby player is removed"
    )
    cleanup_interval_seconds: float = Field(
        default=60,
        gt=0,
        description="How often the gateway runs room cleanup"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't go below the minimum."""
        min_players = info.data.get('min_players', 2)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


ENV_PREFIX = "KITTEN_"


def rules_from_env(environ=None) -> RuleConfig:
    """Build a RuleConfig, letting KITTEN_<FIELD> environment variables override defaults."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for name in RuleConfig.model_fields:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return create_rules(**overrides)

"""
Game rule configuration and validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DRAW_TWO_BUDGET, HAND_SIZE, MAX_PLAYERS, MIN_PLAYERS


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_players: int = Field(
        default=MIN_PLAYERS,
        ge=2,
        le=6,
        description="Minimum number of players required to start a round"
    )
    max_players: int = Field(
        default=MAX_PLAYERS,
        ge=2,
        le=6,
        description="Maximum number of players allowed"
    )
    hand_size: int = Field(
        default=HAND_SIZE,
        ge=2,
        le=6,
        description="Cards dealt to each player at round start"
    )
    draw_two_budget: int = Field(
        default=DRAW_TWO_BUDGET,
        ge=1,
        le=4,
        description="Cards offered by one Draw 2 chain"
    )
    reveal_outer_cards: bool = Field(
        default=True,
        description="Show a player their own leftmost and rightmost cards in their view"
    )
    log_history: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Game log entries included in each player view"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for deterministic shuffling (None = system entropy)"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below minimum."""
        min_players = info.data.get('min_players', MIN_PLAYERS)
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

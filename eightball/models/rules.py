"""Rules configuration."""

from pydantic import BaseModel, Field


class RulesConfig(BaseModel):
    """Tunable constants of the 8-ball ruleset."""

    min_break_rail_contacts: int = Field(default=4, ge=0)
    balls_per_group: int = Field(default=7, ge=1, le=7)

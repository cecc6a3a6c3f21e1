"""Classified Shot — what the Shot Classifier reports about one shot."""

from typing import List, Optional, Set

from pydantic import BaseModel

from eightball.models.ball import EIGHT_BALL, BallGroup, ball_group


class ClassifiedShot(BaseModel):
    """The sub-events of one shot, partitioned for the Ruling Engine."""

    pocketed: List[int] = []                        # In the order they dropped
    scratched: bool = False                         # Cue ball pocketed / off table
    eight_pocketed: bool = False
    first_contact_group: Optional[BallGroup] = None  # None = no recognised contact
    rail_contacted_ball_numbers: Set[int] = set()
    off_table: List[int] = []

    @property
    def object_balls_pocketed(self) -> List[int]:
        """Pocketed balls other than the eight."""
        return [b for b in self.pocketed if b != EIGHT_BALL]

    @property
    def pocketed_groups(self) -> Set[BallGroup]:
        return {ball_group(b) for b in self.object_balls_pocketed}

    @property
    def eight_off_table(self) -> bool:
        return EIGHT_BALL in self.off_table

    @property
    def object_balls_off_table(self) -> List[int]:
        return [b for b in self.off_table if b != EIGHT_BALL]

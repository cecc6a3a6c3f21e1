"""Ball model — numbered balls and the group each one belongs to."""

from enum import Enum

EIGHT_BALL = 8
LOWEST_BALL = 1
HIGHEST_BALL = 15


class BallGroup(str, Enum):
    SOLID = "solid"     # 1-7
    EIGHT = "eight"     # 8
    STRIPE = "stripe"   # 9-15


def ball_group(number: int) -> BallGroup:
    """Group of a numbered ball. Raises ValueError outside 1-15."""
    if not LOWEST_BALL <= number <= HIGHEST_BALL:
        raise ValueError(f"No such ball: {number}")
    if number < EIGHT_BALL:
        return BallGroup.SOLID
    if number == EIGHT_BALL:
        return BallGroup.EIGHT
    return BallGroup.STRIPE

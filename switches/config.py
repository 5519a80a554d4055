from dataclasses import dataclass
from typing import Optional


@dataclass
class FieldConfig:
    """
    Tunable constants for field generation.

    The defaults are the values the game was tuned with by play-testing.
    """

    # Consecutive failed walk steps before an attempt is abandoned
    stall_limit: int = 10
    # A walk step toggles a switch one time in this many
    switch_toggle_odds: int = 4
    # Cap on switches hosted by one room; None means max(1, switch_count // 2)
    max_switches_per_room: Optional[int] = None
    # None retries forever; otherwise GenerationError after this many attempts
    max_attempts: Optional[int] = None
    verbose: bool = False

    def switch_cap(self, switch_count: int) -> int:
        if self.max_switches_per_room is not None:
            return self.max_switches_per_room
        return max(1, switch_count // 2)

    def relax_limit(self, switch_count: int) -> int:
        """Most DONT_CARE entries a revisited passage may end up with."""
        return max(0, switch_count - 1)


__all__ = ["FieldConfig"]

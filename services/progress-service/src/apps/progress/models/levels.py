# services/progress-service/src/apps/progress/models/levels.py
"""
Skill level and sport enumerations shared by the progress models.
"""

from django.db import models


class SkillLevel(models.TextChoices):
    """
    Ordered skill tiers.

    Declaration order is the tier order; ordinal() and from_ordinal()
    convert between labels and their rank.
    """

    FIRST_TIME = 'first_time', 'First Time'
    DEVELOPING_TURNS = 'developing_turns', 'Developing Turns'
    LINKING_TURNS = 'linking_turns', 'Linking Turns'
    CONFIDENT_TURNS = 'confident_turns', 'Confident Turns'
    CONSISTENT_BLUE = 'consistent_blue', 'Consistent Blue'

    @classmethod
    def ordinal(cls, label) -> int:
        """
        Rank of a level label.

        Raises:
            ValueError: If the label is not a known level
        """
        return cls.values.index(str(label))

    @classmethod
    def from_ordinal(cls, rank: int) -> 'SkillLevel':
        if rank < 0 or rank >= len(cls.values):
            raise ValueError(f"No skill level with ordinal {rank}")
        return cls(cls.values[rank])


class Sport(models.TextChoices):
    SKIING = 'skiing', 'Skiing'
    SNOWBOARDING = 'snowboarding', 'Snowboarding'

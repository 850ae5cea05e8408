"""QuestMap Engine: deterministic world, encounters and combat for a location-based RPG."""

__version__ = "0.1.0"

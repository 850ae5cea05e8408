"""Core game rules: seeded randomness, world generation, encounters and combat."""

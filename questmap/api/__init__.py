"""HTTP API for the QuestMap Engine."""

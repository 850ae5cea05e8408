"""HTTP routes for the QuestMap Engine."""

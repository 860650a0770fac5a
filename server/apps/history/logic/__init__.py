"""Business logic for historic executions."""

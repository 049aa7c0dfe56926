"""Agent loop, tool execution and model gateway."""

"""Data model, conversation state and errors shared across the package."""

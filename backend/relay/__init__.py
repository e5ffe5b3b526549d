"""OpenRouter streaming relay."""

"""OpenAI compatible gateway for the Anthropic Messages API."""

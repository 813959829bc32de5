"""Local development service emitting an OpenAI-style SSE chat stream."""

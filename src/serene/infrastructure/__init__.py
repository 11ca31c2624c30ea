"""Infrastructure layer: LLM providers, storage, notifiers, monitoring."""

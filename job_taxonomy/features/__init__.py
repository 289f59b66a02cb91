"""Feature modules: sanitization, LLM access, dataset loading."""

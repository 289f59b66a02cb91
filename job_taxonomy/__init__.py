"""LLM-backed job description taxonomy classification and ranking."""

"""Enumerations shared by the schema, validation and the API."""

PROVIDER_TYPES = ("azure", "ollama", "openai", "huggingface", "custom")
DATASET_TYPES = ("qa", "summarization", "translation", "classification", "custom")
INFERENCE_STATUSES = ("pending", "running", "completed", "failed")

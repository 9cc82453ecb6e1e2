"""
Provider connection checks.

Each check performs one cheap authenticated request against the backend and
reduces the outcome to a boolean: success is "no exception", anything else
is ``False``. There is no retry and no distinction between an unreachable
host and a rejected credential; the reason is only logged.
"""

import asyncio
import json
import urllib.request
from typing import Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..config import config as app_config
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

HUGGINGFACE_WHOAMI_URL = "https://huggingface.co/api/whoami-v2"
_TIMEOUT_SECONDS = 10
VALIDATABLE_TYPES = ("azure", "openai", "ollama", "huggingface")


def _http_get_json(url: str, api_key: Optional[str] = None, timeout: int = _TIMEOUT_SECONDS):
    """GET *url* and decode the JSON body. Raises on HTTP or network errors."""
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    req = urllib.request.Request(url, headers=headers)
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read().decode("utf-8"))


async def validate_azure_provider(
    endpoint: str, api_key: str, api_version: Optional[str] = None
) -> bool:
    """List models on an Azure OpenAI resource."""
    client = AsyncAzureOpenAI(
        api_key=api_key,
        api_version=api_version or app_config.azure_api_version,
        azure_endpoint=endpoint,
        timeout=_TIMEOUT_SECONDS,
    )
    try:
        await client.models.list()
        return True
    except Exception as e:
        logger.warning("Azure provider validation failed for %s: %s", endpoint, e)
        return False
    finally:
        await client.close()


async def validate_openai_provider(api_key: str, endpoint: Optional[str] = None) -> bool:
    """List models with an OpenAI API key."""
    client = AsyncOpenAI(api_key=api_key, base_url=endpoint or None, timeout=_TIMEOUT_SECONDS)
    try:
        await client.models.list()
        return True
    except Exception as e:
        logger.warning("OpenAI provider validation failed: %s", e)
        return False
    finally:
        await client.close()


async def validate_ollama_provider(endpoint: str) -> bool:
    """Query the Ollama tag list (``GET /api/tags``)."""
    url = f"{endpoint.rstrip('/')}/api/tags"
    try:
        await asyncio.to_thread(_http_get_json, url)
        return True
    except Exception as e:
        logger.warning("Ollama provider validation failed for %s: %s", endpoint, e)
        return False


async def validate_huggingface_provider(api_key: str) -> bool:
    """Resolve the token owner via the Hugging Face whoami endpoint."""
    try:
        await asyncio.to_thread(_http_get_json, HUGGINGFACE_WHOAMI_URL, api_key)
        return True
    except Exception as e:
        logger.warning("HuggingFace provider validation failed: %s", e)
        return False


async def validate_provider_connection(
    provider_type: str,
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
) -> bool:
    """
    Dispatch to the check for *provider_type*.

    Missing inputs count as a failed check rather than an error.

    Raises:
        ValueError: If no check exists for the type
    """
    if provider_type == "azure":
        if not endpoint or not api_key:
            return False
        return await validate_azure_provider(endpoint, api_key)
    if provider_type == "openai":
        if not api_key:
            return False
        return await validate_openai_provider(api_key, endpoint)
    if provider_type == "ollama":
        if not endpoint:
            return False
        return await validate_ollama_provider(endpoint)
    if provider_type == "huggingface":
        if not api_key:
            return False
        return await validate_huggingface_provider(api_key)
    raise ValueError(f"No connection check for provider type: {provider_type}")

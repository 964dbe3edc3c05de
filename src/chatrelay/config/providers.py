# src/chatrelay/config/providers.py
import enum
from dataclasses import dataclass
from typing import Dict, List, Optional


class ProviderType(enum.Enum):
    GROQ = "groq"
    OLLAMA = "ollama"


@dataclass
class ProviderConfig:
    name: str
    required_env_vars: List[str]
    example_model: str
    description: str
    endpoint: str


PROVIDER_CONFIGS: Dict[ProviderType, ProviderConfig] = {
    ProviderType.GROQ: ProviderConfig(
        name="groq",
        required_env_vars=["GROQ_API_KEY"],
        example_model="llama3-70b-8192",
        description="Groq (cloud)",
        endpoint="https://api.groq.com/openai/v1/chat/completions",
    ),
    ProviderType.OLLAMA: ProviderConfig(
        name="ollama",
        required_env_vars=[],
        example_model="llama3",
        description="Ollama (local)",
        endpoint="http://localhost:11434/api/chat",
    ),
}


def parse_provider(value: Optional[str]) -> Optional[ProviderType]:
    """Turn a provider tag into a ProviderType

    Args:
        value: Tag such as "groq" or "ollama", or None

    Returns:
        ProviderType, or None when no tag was given

    Raises:
        ValueError: If the tag names no known provider
    """
    if value is None or value == "":
        return None
    if isinstance(value, ProviderType):
        return value
    try:
        return ProviderType(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in ProviderType)
        raise ValueError(f"Invalid provider: {value} (expected one of: {valid})")


def resolve_provider(
    override: Optional[ProviderType],
    session_provider: Optional[ProviderType],
    default: ProviderType,
) -> ProviderType:
    """Pick the provider for a request: override, then session, then default"""
    return override or session_provider or default

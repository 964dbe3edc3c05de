# src/chatrelay/config/manager.py
import json
import logging
import os
from base64 import b64encode
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from dotenv import load_dotenv

from .providers import PROVIDER_CONFIGS, ProviderType

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigManager:
    """Stores default models and encrypted provider credentials per user"""

    def __init__(self, create: bool = True):
        self.config_dir = Path.home() / ".chatrelay"
        self.config_file = self.config_dir / "config.json"
        self.secrets_file = self.config_dir / "secrets.enc"
        self._init_encryption()
        if create:
            self.ensure_config_dir()

    def _init_encryption(self):
        """Initialize encryption key"""
        salt = b"chatrelay_salt"
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=100000,
        )
        key = b64encode(kdf.derive(b"chatrelay_secret_key"))
        self._fernet = Fernet(key)

    def ensure_config_dir(self):
        """Create config directory if it doesn't exist"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        if not self.config_file.exists():
            self.save_config({})
        if not self.secrets_file.exists():
            self.secrets_file.write_bytes(self._fernet.encrypt(b"{}"))

    def load_config(self) -> Dict:
        """Load configuration from file"""
        try:
            if self.config_file.exists():
                return json.loads(self.config_file.read_text())
            return {}
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable config file %s", self.config_file)
            return {}

    def save_config(self, config: Dict):
        """Save configuration to file"""
        self.config_file.write_text(json.dumps(config, indent=2))

    def load_secrets(self) -> Dict[str, str]:
        """Load encrypted secrets"""
        try:
            if not self.secrets_file.exists() or self.secrets_file.stat().st_size == 0:
                return {}
            decrypted_data = self._fernet.decrypt(self.secrets_file.read_bytes())
            return json.loads(decrypted_data)
        except Exception as e:
            logger.warning("Could not read stored secrets: %s", e)
            return {}

    def save_secrets(self, secrets: Dict[str, str]):
        """Save encrypted secrets"""
        encrypted_data = self._fernet.encrypt(json.dumps(secrets).encode())
        self.secrets_file.write_bytes(encrypted_data)

    def save_provider_config(
        self,
        provider: ProviderType,
        model_name: str,
        env_vars: Optional[Dict[str, str]] = None,
    ):
        """Save the model and credentials for a provider

        Args:
            provider: Provider type
            model_name: Default model for this provider
            env_vars: Credentials to store encrypted, keyed by env var name
        """
        config = self.load_config()
        config.setdefault("providers", {})

        if env_vars:
            secrets = self.load_secrets()
            for key, value in env_vars.items():
                secrets[f"{provider.value}_{key}"] = value
            self.save_secrets(secrets)

        provider_config = config["providers"].setdefault(provider.value, {})
        provider_config["default_model"] = model_name
        if env_vars:
            provider_config["env_vars"] = list(env_vars.keys())

        self.save_config(config)

    def get_provider_model(self, provider: ProviderType) -> Optional[str]:
        """Get the stored default model for a provider"""
        config = self.load_config()
        return config.get("providers", {}).get(provider.value, {}).get("default_model")

    def get_provider_credentials(self, provider: ProviderType) -> Dict[str, str]:
        """Get stored credentials for a provider, keyed by env var name"""
        prefix = f"{provider.value}_"
        return {
            key[len(prefix) :]: value
            for key, value in self.load_secrets().items()
            if key.startswith(prefix)
        }

    def validate_provider_setup(
        self, provider: ProviderType, model_name: str, api_key: Optional[str] = None
    ) -> bool:
        """Send a one-token test request through LiteLLM

        Args:
            provider: Provider to test (only GROQ needs credentials)
            model_name: Model name to test
            api_key: Key to test instead of the stored one

        Returns:
            bool: True if the request succeeded
        """
        from litellm import completion

        if provider == ProviderType.GROQ:
            key = api_key or self.get_provider_credentials(provider).get("GROQ_API_KEY")
            call_kwargs = {"model": f"groq/{model_name}", "api_key": key}
        else:
            call_kwargs = {"model": f"ollama_chat/{model_name}"}

        try:
            completion(
                messages=[{"role": "user", "content": "test"}],
                max_tokens=1,
                **call_kwargs,
            )
            return True
        except Exception as e:
            logger.warning("Validation of %s failed: %s", provider.value, e)
            return False


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


def _base_url(value: str) -> str:
    # OLLAMA_HOST is often given as host:port
    if "://" not in value:
        value = f"http://{value}"
    return value.rstrip("/")


@dataclass
class Settings:
    """Process settings, read from the environment"""

    host: str = "127.0.0.1"
    port: int = 3001
    data_dir: Path = field(default_factory=lambda: Path("data"))
    ollama_model: str = PROVIDER_CONFIGS[ProviderType.OLLAMA].example_model
    ollama_host: str = "http://localhost:11434"
    groq_model: str = PROVIDER_CONFIGS[ProviderType.GROQ].example_model
    groq_api_key: str = ""
    use_groq_default: bool = False
    restore_sessions: bool = False
    log_level: str = "WARNING"

    @property
    def default_provider(self) -> ProviderType:
        """Provider for server sessions that do not name one"""
        return ProviderType.GROQ if self.use_groq_default else ProviderType.OLLAMA

    @property
    def console_provider(self) -> ProviderType:
        """Provider for the console loop: cloud when a key is present"""
        return ProviderType.GROQ if self.groq_api_key.strip() else ProviderType.OLLAMA

    def model_for(self, provider: ProviderType) -> str:
        if provider == ProviderType.GROQ:
            return self.groq_model
        return self.ollama_model

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_manager: Optional[ConfigManager] = None,
        load_env_file: bool = True,
    ) -> "Settings":
        """Build settings from the environment

        Environment variables win over values stored with `chatrelay configure`.

        Args:
            environ: Mapping to read instead of os.environ
            config_manager: Stored configuration to fall back on
            load_env_file: Whether to read a .env file first

        Raises:
            ValueError: If PORT is not an integer
        """
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ
        if config_manager is None:
            config_manager = ConfigManager(create=False)

        stored_key = config_manager.get_provider_credentials(ProviderType.GROQ).get(
            "GROQ_API_KEY", ""
        )
        defaults = cls()

        try:
            port = int(environ.get("PORT") or defaults.port)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {environ.get('PORT')!r}")

        return cls(
            host=environ.get("HOST", defaults.host),
            port=port,
            data_dir=Path(environ.get("DATA_DIR") or defaults.data_dir),
            ollama_model=environ.get("OLLAMA_MODEL")
            or config_manager.get_provider_model(ProviderType.OLLAMA)
            or defaults.ollama_model,
            ollama_host=_base_url(environ.get("OLLAMA_HOST") or defaults.ollama_host),
            groq_model=environ.get("GROQ_MODEL")
            or config_manager.get_provider_model(ProviderType.GROQ)
            or defaults.groq_model,
            groq_api_key=(environ.get("GROQ_API_KEY") or stored_key).strip(),
            use_groq_default=_env_flag(environ.get("USE_GROQ")),
            restore_sessions=_env_flag(environ.get("RESTORE_SESSIONS")),
            log_level=environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )

"""
Configuration and environment handling for Item Scout.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .models.credentials import CredentialSet

# Load environment variables
load_dotenv()


class OpenAIConfig(BaseModel):
    """OpenAI API configuration."""
    api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    drafting_model: str = Field(default="gpt-4o-mini")
    vision_model: str = Field(default="gpt-4o-mini")
    research_model: str = Field(default="gpt-4o-mini")
    max_tokens: int = Field(default=2048)
    temperature: float = Field(default=0.7)


class EbayConfig(BaseModel):
    """eBay Browse API configuration."""
    app_id: str = Field(default_factory=lambda: os.getenv("EBAY_APP_ID", ""))
    client_secret: str = Field(default_factory=lambda: os.getenv("EBAY_CLIENT_SECRET", ""))
    oauth_token: str = Field(default_factory=lambda: os.getenv("EBAY_OAUTH_TOKEN", ""))
    api_base_url: str = Field(default="https://api.ebay.com")
    marketplace_id: str = Field(default="EBAY_US")
    oauth_scope: str = Field(default="https://api.ebay.com/oauth/api_scope")
    result_limit: int = Field(default=3, description="Comparable items per search")
    request_timeout: float = Field(default=15.0, description="Seconds per HTTP request")


class PipelineConfig(BaseModel):
    """Listing pipeline configuration."""
    title_max_length: int = Field(default=80, description="Marketplace title limit")
    keyword_limit: int = Field(default=5, description="Keywords derived from comparables")


class StorageConfig(BaseModel):
    """Local persistence configuration."""
    data_dir: Path = Field(default_factory=lambda: Path(os.getenv("SCOUT_DATA_DIR", ".scout")))
    store_filename: str = Field(default="scout_store.json")

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_filename


class Config(BaseModel):
    """Main configuration."""
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    ebay: EbayConfig = Field(default_factory=EbayConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    def env_credentials(self) -> CredentialSet:
        """Credentials as provided by the environment."""
        return CredentialSet(
            chat_gpt_api_key=self.openai.api_key,
            ebay_app_id=self.ebay.app_id,
            ebay_client_secret=self.ebay.client_secret,
            ebay_oauth_token=self.ebay.oauth_token,
        )


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config

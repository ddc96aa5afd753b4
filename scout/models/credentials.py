"""
Credential model - named backend credentials.
"""
from pydantic import Field, field_validator

from .base import CamelModel


# Stored field name of the single eBay key used before App ID / secret / token
LEGACY_EBAY_KEY_FIELD = "ebayApiKey"


class CredentialSet(CamelModel):
    """Drafting and marketplace credentials. Missing values are empty strings."""
    chat_gpt_api_key: str = ""
    ebay_app_id: str = ""
    ebay_client_secret: str = ""
    ebay_oauth_token: str = Field(default="", alias="ebayOAuthToken")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        """Anything that is not a string is treated as absent."""
        if isinstance(v, str):
            return v
        return ""

    @property
    def has_drafting_key(self) -> bool:
        return bool(self.chat_gpt_api_key.strip())

    @property
    def has_ebay_oauth(self) -> bool:
        """Either a bearer token or an App ID + secret pair for client credentials."""
        if self.ebay_oauth_token.strip():
            return True
        return bool(self.ebay_app_id.strip()) and bool(self.ebay_client_secret.strip())

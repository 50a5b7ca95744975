"""
MyInvois Configuration Types and Schema
Type-safe configuration objects for the MyInvois SDK
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from myinvois.validators.tin_validator import TIN_PATTERN, TIN_FORMAT_MESSAGE


class MyInvoisEnvironment(str, Enum):
    """MyInvois environment types"""
    SANDBOX = "sandbox"
    PRODUCTION = "production"


# Base URLs for the business API
MYINVOIS_BASE_URLS = {
    MyInvoisEnvironment.SANDBOX: "https://preprod-api.myinvois.hasil.gov.my",
    MyInvoisEnvironment.PRODUCTION: "https://api.myinvois.hasil.gov.my",
}

# Base URLs for the identity (token) service
MYINVOIS_IDENTITY_URLS = {
    MyInvoisEnvironment.SANDBOX: "https://preprod-api.myinvois.hasil.gov.my",
    MyInvoisEnvironment.PRODUCTION: "https://api.myinvois.hasil.gov.my",
}

# Public portal URLs, used for shareable document links
MYINVOIS_PORTAL_URLS = {
    MyInvoisEnvironment.SANDBOX: "https://preprod.myinvois.hasil.gov.my",
    MyInvoisEnvironment.PRODUCTION: "https://myinvois.hasil.gov.my",
}


class ConfigDefaults:
    """Default configuration values"""
    ENVIRONMENT = MyInvoisEnvironment.SANDBOX
    TIMEOUT = 30000
    CONNECT_TIMEOUT = 10000
    RETRY_ATTEMPTS = 3
    RETRY_DELAY = 1000
    MAX_RETRY_DELAY = 10000
    TOKEN_REFRESH_BUFFER = 300
    ENABLE_LOGGING = True
    SCOPE = "InvoicingAPI"


# Environment variable mapping
ENV_VAR_MAPPING = {
    "MYINVOIS_CLIENT_ID": "client_id",
    "MYINVOIS_CLIENT_SECRET": "client_secret",
    "MYINVOIS_ENVIRONMENT": "environment",
    "MYINVOIS_BASE_URL": "base_url",
    "MYINVOIS_IDENTITY_URL": "identity_url",
    "MYINVOIS_TIMEOUT": "timeout",
    "MYINVOIS_CONNECT_TIMEOUT": "connect_timeout",
    "MYINVOIS_RETRY_ATTEMPTS": "retry_attempts",
    "MYINVOIS_RETRY_DELAY": "retry_delay",
    "MYINVOIS_MAX_RETRY_DELAY": "max_retry_delay",
    "MYINVOIS_TOKEN_REFRESH_BUFFER": "token_refresh_buffer",
    "MYINVOIS_INTERMEDIARY": "intermediary",
    "MYINVOIS_DEFAULT_TAXPAYER_TIN": "default_taxpayer_tin",
    "MYINVOIS_ENABLE_LOGGING": "enable_logging",
}


class MyInvoisConfig(BaseModel):
    """
    Main MyInvois configuration class
    Defines all configuration options for the MyInvois SDK
    """

    # Required - OAuth2 client credentials
    client_id: str = Field(
        ...,
        description="OAuth2 client ID issued by the MyInvois portal",
        min_length=1
    )
    client_secret: str = Field(
        ...,
        description="OAuth2 client secret issued by the MyInvois portal",
        min_length=1
    )

    # Optional - Environment settings
    environment: MyInvoisEnvironment = Field(
        default=MyInvoisEnvironment.SANDBOX,
        description="Environment: 'sandbox' or 'production'"
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Override default API base URL"
    )
    identity_url: Optional[str] = Field(
        default=None,
        description="Override default identity service URL"
    )
    timeout: int = Field(
        default=ConfigDefaults.TIMEOUT,
        description="Request timeout in milliseconds",
        ge=1000,
        le=300000
    )
    connect_timeout: int = Field(
        default=ConfigDefaults.CONNECT_TIMEOUT,
        description="Connect timeout in milliseconds",
        ge=1000,
        le=300000
    )
    retry_attempts: int = Field(
        default=ConfigDefaults.RETRY_ATTEMPTS,
        description="Maximum number of attempts for retryable submissions",
        ge=1,
        le=10
    )
    retry_delay: int = Field(
        default=ConfigDefaults.RETRY_DELAY,
        description="Base delay between retries in milliseconds",
        ge=1,
        le=60000
    )
    max_retry_delay: int = Field(
        default=ConfigDefaults.MAX_RETRY_DELAY,
        description="Upper bound for the backoff delay in milliseconds",
        ge=1,
        le=300000
    )
    token_refresh_buffer: int = Field(
        default=ConfigDefaults.TOKEN_REFRESH_BUFFER,
        description="Seconds before expiry at which a token is considered stale",
        ge=0,
        le=3600
    )

    # Optional - Intermediary mode
    intermediary: bool = Field(
        default=False,
        description="Authenticate as an intermediary acting on behalf of taxpayers"
    )
    default_taxpayer_tin: Optional[str] = Field(
        default=None,
        description="Taxpayer TIN to act on behalf of (intermediary mode)"
    )

    # Optional - Logging
    enable_logging: bool = Field(
        default=ConfigDefaults.ENABLE_LOGGING,
        description="Enable request/response debug logging"
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("base_url", "identity_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate URL fields are HTTP(S) URLs"""
        if v is not None and v != "":
            if not v.startswith(("http://", "https://")):
                raise ValueError("URL must be a valid HTTP/HTTPS URL")
            return v.rstrip("/")
        return v

    @field_validator("default_taxpayer_tin")
    @classmethod
    def validate_default_taxpayer_tin(cls, v: Optional[str]) -> Optional[str]:
        """Validate the default taxpayer TIN format"""
        if v is not None and not TIN_PATTERN.fullmatch(v):
            raise ValueError(TIN_FORMAT_MESSAGE)
        return v

    @model_validator(mode="after")
    def set_default_urls(self) -> "MyInvoisConfig":
        """Set default URLs based on environment if not provided"""
        if not self.base_url:
            self.base_url = MYINVOIS_BASE_URLS[self.environment]
        if not self.identity_url:
            self.identity_url = MYINVOIS_IDENTITY_URLS[self.environment]
        return self

    @property
    def is_intermediary(self) -> bool:
        """Whether the client should authenticate in intermediary mode"""
        return self.intermediary or self.default_taxpayer_tin is not None

    def get_resolved_base_url(self) -> str:
        """Get the resolved API base URL"""
        return self.base_url or MYINVOIS_BASE_URLS[self.environment]

    def get_resolved_identity_url(self) -> str:
        """Get the resolved identity service URL"""
        return self.identity_url or MYINVOIS_IDENTITY_URLS[self.environment]

    def get_portal_url(self) -> str:
        """Get the public portal URL"""
        return MYINVOIS_PORTAL_URLS[self.environment]

"""
Configuration Examples for the MyInvois SDK
Demonstrates various ways to configure and use the client
"""

import logging

from myinvois import MyInvoisClient, SubmissionItem
from myinvois.config import (
    ConfigLoader,
    ConfigValidator,
    MyInvoisConfig,
    MyInvoisEnvironment,
)


# =============================================================================
# Example 1: Programmatic Configuration
# =============================================================================

def programmatic_config_example() -> MyInvoisConfig:
    """Configure SDK programmatically with all options"""
    loader = ConfigLoader()

    return loader.load(
        config={
            # Required OAuth2 client credentials
            "client_id": "your-client-id",
            "client_secret": "your-client-secret",

            # Environment settings
            "environment": MyInvoisEnvironment.SANDBOX,  # Use PRODUCTION for live
            "timeout": 30000,
            "retry_attempts": 3,
            "retry_delay": 1000,
            "max_retry_delay": 10000,
            "token_refresh_buffer": 300,
        },
        env=False,
    )


# =============================================================================
# Example 2: File and Environment Configuration
# =============================================================================

def merged_config_example() -> MyInvoisConfig:
    """
    Merge configuration from multiple sources
    Priority: programmatic > environment > file

    Environment variables use the MYINVOIS_ prefix:

    export MYINVOIS_CLIENT_ID="your-client-id"
    export MYINVOIS_CLIENT_SECRET="your-client-secret"
    export MYINVOIS_ENVIRONMENT="production"
    """
    loader = ConfigLoader()
    return loader.load(
        file="./config/myinvois_config.json",
        env=True,
        config={"timeout": 60000},
    )


# =============================================================================
# Example 3: Intermediary Mode
# =============================================================================

def intermediary_example() -> None:
    """Act on behalf of several taxpayers with one set of credentials"""
    client = MyInvoisClient.from_config({
        "client_id": "your-client-id",
        "client_secret": "your-client-secret",
        "intermediary": True,
        "default_taxpayer_tin": "C1234567890",
    })

    with client:
        recent = client.get_recent_documents({"pageSize": 10})
        print(f"C1234567890 has {len(recent.result)} recent document(s)")

        client.on_behalf_of("C0987654321")
        recent = client.get_recent_documents({"pageSize": 10})
        print(f"C0987654321 has {len(recent.result)} recent document(s)")


# =============================================================================
# Example 4: Submitting Documents
# =============================================================================

def submission_example(config: MyInvoisConfig, invoice_json: str) -> None:
    """Submit a signed invoice and wait for validation"""
    with MyInvoisClient(config) as client:
        result = client.submit_documents([SubmissionItem.from_content(invoice_json, "INV-001")])

        for rejected in result.rejected_documents:
            print(f"Rejected {rejected.invoice_code_number}: {rejected.error}")

        for document in client.get_all_submission_documents(result.submission_uid):
            print(f"{document.internal_id}: {document.status}")


# =============================================================================
# Example 5: Configuration Validation
# =============================================================================

def validation_example() -> None:
    """Validate configuration before use"""
    validator = ConfigValidator()

    result = validator.validate({"client_id": "your-client-id", "timeout": 500})

    if not result.valid:
        print("Configuration validation failed:")
        for error in result.errors:
            print(f"  - {error.field}: {error.message}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    print("=== MyInvois Configuration Examples ===\n")
    validation_example()

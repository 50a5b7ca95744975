"""
Configuration Validator
Validates MyInvois configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from myinvois.config.myinvois_config import MyInvoisEnvironment
from myinvois.validators.tin_validator import TIN_PATTERN, TIN_FORMAT_MESSAGE


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)

    def to_error_map(self) -> Dict[str, List[str]]:
        """Group error messages by field"""
        grouped: Dict[str, List[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped


class ConfigValidator:
    """
    ConfigValidator class
    Provides comprehensive validation for MyInvois configuration
    """

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary

        Args:
            config: Configuration dictionary to validate

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_required(config)
        self._validate_formats(config)
        self._validate_ranges(config)
        self._validate_environment(config)
        self._validate_intermediary(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValidationError: If configuration is invalid
        """
        from myinvois.exceptions import ValidationError

        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Configuration validation failed: {error_messages}",
                errors=result.to_error_map(),
            )

    def _validate_required(self, config: Dict[str, Any]) -> None:
        """Validate required fields are present and non-empty"""
        for field_name in ("client_id", "client_secret"):
            value = config.get(field_name)
            if value is None:
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message=f"{field_name} is required"
                ))
            elif isinstance(value, str) and value.strip() == "":
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message=f"{field_name} cannot be empty",
                    value="[REDACTED]" if field_name == "client_secret" else value
                ))

    def _validate_formats(self, config: Dict[str, Any]) -> None:
        """Validate field formats"""
        for url_field in ("base_url", "identity_url"):
            url = config.get(url_field)
            if url is not None and url != "":
                if not isinstance(url, str) or not url.startswith(("http://", "https://")):
                    self._errors.append(ValidationErrorDetail(
                        field=url_field,
                        message=f"{url_field} must be a valid HTTP/HTTPS URL",
                        value=url
                    ))

        tin = config.get("default_taxpayer_tin")
        if tin is not None and tin != "":
            if not isinstance(tin, str) or not TIN_PATTERN.fullmatch(tin):
                self._errors.append(ValidationErrorDetail(
                    field="default_taxpayer_tin",
                    message=TIN_FORMAT_MESSAGE,
                    value=tin
                ))

    def _validate_ranges(self, config: Dict[str, Any]) -> None:
        """Validate numeric ranges"""
        for timeout_field in ("timeout", "connect_timeout"):
            timeout = config.get(timeout_field)
            if timeout is None:
                continue
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                self._errors.append(ValidationErrorDetail(
                    field=timeout_field,
                    message=f"{timeout_field} must be a positive number (milliseconds)",
                    value=timeout
                ))
            elif timeout < 1000:
                self._errors.append(ValidationErrorDetail(
                    field=timeout_field,
                    message=f"{timeout_field} should be at least 1000ms for reliable operation",
                    value=timeout
                ))
            elif timeout > 300000:
                self._errors.append(ValidationErrorDetail(
                    field=timeout_field,
                    message=f"{timeout_field} should not exceed 300000ms (5 minutes)",
                    value=timeout
                ))

        retry_attempts = config.get("retry_attempts")
        if retry_attempts is not None:
            if not isinstance(retry_attempts, int) or retry_attempts < 1:
                self._errors.append(ValidationErrorDetail(
                    field="retry_attempts",
                    message="retry_attempts must be a positive integer",
                    value=retry_attempts
                ))
            elif retry_attempts > 10:
                self._errors.append(ValidationErrorDetail(
                    field="retry_attempts",
                    message="retry_attempts should not exceed 10",
                    value=retry_attempts
                ))

        for delay_field, upper in (("retry_delay", 60000), ("max_retry_delay", 300000)):
            delay = config.get(delay_field)
            if delay is None:
                continue
            if not isinstance(delay, (int, float)) or delay <= 0:
                self._errors.append(ValidationErrorDetail(
                    field=delay_field,
                    message=f"{delay_field} must be a positive number (milliseconds)",
                    value=delay
                ))
            elif delay > upper:
                self._errors.append(ValidationErrorDetail(
                    field=delay_field,
                    message=f"{delay_field} should not exceed {upper}ms",
                    value=delay
                ))

        buffer = config.get("token_refresh_buffer")
        if buffer is not None:
            if not isinstance(buffer, int) or buffer < 0 or buffer > 3600:
                self._errors.append(ValidationErrorDetail(
                    field="token_refresh_buffer",
                    message="token_refresh_buffer must be between 0 and 3600 seconds",
                    value=buffer
                ))

    def _validate_environment(self, config: Dict[str, Any]) -> None:
        """Validate environment setting"""
        environment = config.get("environment")
        if environment is not None:
            valid_environments = [e.value for e in MyInvoisEnvironment]
            env_value = (
                environment.value
                if isinstance(environment, MyInvoisEnvironment)
                else environment
            )
            if env_value not in valid_environments:
                self._errors.append(ValidationErrorDetail(
                    field="environment",
                    message=f"environment must be one of: {', '.join(valid_environments)}",
                    value=environment
                ))

    def _validate_intermediary(self, config: Dict[str, Any]) -> None:
        """Validate intermediary settings are consistent"""
        if config.get("intermediary") is False and config.get("default_taxpayer_tin"):
            self._errors.append(ValidationErrorDetail(
                field="default_taxpayer_tin",
                message="default_taxpayer_tin requires intermediary mode",
                value=config.get("default_taxpayer_tin")
            ))

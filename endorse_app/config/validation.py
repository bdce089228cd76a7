"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a configuration validation problem."""
    field: str
    message: str
    value: Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_endpoint_params(params: dict[str, Any]) -> list[ValidationIssue]:
        """Validate submission endpoint parameters."""
        issues = []

        if "base_url" in params:
            value = params["base_url"]
            parsed = urlparse(value) if isinstance(value, str) else None
            if parsed is None or not parsed.scheme or not parsed.netloc:
                issues.append(ValidationIssue(
                    field="base_url",
                    message="Must be an absolute URL with scheme and host",
                    value=value
                ))

        for path_field in ("endorse_path", "login_path"):
            if path_field in params:
                value = params[path_field]
                if not isinstance(value, str) or not value.startswith("/"):
                    issues.append(ValidationIssue(
                        field=path_field,
                        message="Must be a path starting with '/'",
                        value=value
                    ))

        if "return_param" in params:
            value = params["return_param"]
            if not isinstance(value, str) or not value:
                issues.append(ValidationIssue(
                    field="return_param",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                issues.append(ValidationIssue(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return issues

    @staticmethod
    def validate_resume_policy(params: dict[str, Any]) -> list[ValidationIssue]:
        """Validate resume polling policy."""
        issues = []

        if "max_attempts" in params and not _is_positive_int(params["max_attempts"]):
            issues.append(ValidationIssue(
                field="max_attempts",
                message="Must be a positive integer",
                value=params["max_attempts"]
            ))

        if "interval_ms" in params:
            value = params["interval_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                issues.append(ValidationIssue(
                    field="interval_ms",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "use_refresh" in params and not isinstance(params["use_refresh"], bool):
            issues.append(ValidationIssue(
                field="use_refresh",
                message="Must be a boolean",
                value=params["use_refresh"]
            ))

        return issues

    @staticmethod
    def validate_vault_params(params: dict[str, Any]) -> list[ValidationIssue]:
        """Validate vault parameters."""
        issues = []

        for text_field in ("storage_key", "db_path"):
            if text_field in params:
                value = params[text_field]
                if not isinstance(value, str) or not value:
                    issues.append(ValidationIssue(
                        field=text_field,
                        message="Must be a non-empty string",
                        value=value
                    ))

        if "schema_version" in params and not _is_positive_int(params["schema_version"]):
            issues.append(ValidationIssue(
                field="schema_version",
                message="Must be a positive integer",
                value=params["schema_version"]
            ))

        return issues

    @staticmethod
    def validate_aggregation_params(params: dict[str, Any]) -> list[ValidationIssue]:
        """Validate aggregation display limits."""
        issues = []

        for limit_field in ("max_top_tags", "max_recent_endorsements"):
            if limit_field in params and not _is_positive_int(params[limit_field]):
                issues.append(ValidationIssue(
                    field=limit_field,
                    message="Must be a positive integer",
                    value=params[limit_field]
                ))

        return issues

    @staticmethod
    def validate_note_params(params: dict[str, Any]) -> list[ValidationIssue]:
        """Validate note constraints."""
        issues = []

        if "max_length" in params:
            value = params["max_length"]
            if value is not None and not _is_positive_int(value):
                issues.append(ValidationIssue(
                    field="max_length",
                    message="Must be null or a positive integer",
                    value=value
                ))

        return issues

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationIssue]:
        """Validate complete configuration."""
        issues = []

        if "endpoint" in config:
            issues.extend(ConfigValidator.validate_endpoint_params(config["endpoint"]))

        if "resume" in config:
            issues.extend(ConfigValidator.validate_resume_policy(config["resume"]))

        if "vault" in config:
            issues.extend(ConfigValidator.validate_vault_params(config["vault"]))

        if "aggregation" in config:
            issues.extend(ConfigValidator.validate_aggregation_params(config["aggregation"]))

        if "note" in config:
            issues.extend(ConfigValidator.validate_note_params(config["note"]))

        return issues

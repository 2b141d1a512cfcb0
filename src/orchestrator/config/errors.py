from __future__ import annotations

"""Exception types for configuration handling."""


class ConfigurationError(RuntimeError):
    """Raised when settings, environment values or operator input are unusable."""

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def invalid_format(cls, param_name: str, received_value: str, expected_format: str = "") -> "ConfigurationError":
        msg = f"{param_name} has invalid format (received {received_value!r})"
        if expected_format:
            msg += f". Expected {expected_format}"
        return cls(msg)

    @classmethod
    def load_failed(cls, resource: str, identifier: str = "") -> "ConfigurationError":
        msg = f"Failed to load {resource}"
        if identifier:
            msg += f" from {identifier}"
        return cls(msg)

    @classmethod
    def env_not_set(cls, name: str) -> "ConfigurationError":
        """Required environment variable absent from both the environment and ``.env``."""
        return cls(f"Required environment variable {name!r} is not set")

    @classmethod
    def env_wrong_type(cls, name: str, raw_value: str, kind: str) -> "ConfigurationError":
        return cls(f"Environment variable {name!r} must be {kind} (got {raw_value!r})")

    @classmethod
    def no_routing_paths(cls, source: str) -> "ConfigurationError":
        """Proxy list loaded but every line was blank, a comment, or malformed."""
        return cls.missing_value("proxy list", f"no valid proxies found in {source}")

    @classmethod
    def invalid_session_count(cls, raw_value: str) -> "ConfigurationError":
        return cls.invalid_format("session count", raw_value, "a whole number greater than 0")


__all__ = ["ConfigurationError"]

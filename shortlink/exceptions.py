class ShortlinkError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlink_error'


class InvalidArgumentError(ShortlinkError, ValueError):
    """Raised when a caller passes an argument outside of its valid domain."""

    error_code = 'app:invalid_argument_error'


class SlugExhaustedError(ShortlinkError):
    """Raised when no unique slug could be issued within the retry bound."""

    error_code = 'app:slug_exhausted_error'


class ValidationError(ShortlinkError, ValueError):
    """Raised when request data fails validation."""

    error_code = 'app:validation_error'


class ConfigurationError(ShortlinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError, KeyError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'

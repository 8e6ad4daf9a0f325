import json
import logging
import re
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Context variables for correlation
operation_var: ContextVar[Optional[str]] = ContextVar('operation', default=None)
resource_type_var: ContextVar[Optional[str]] = ContextVar('resource_type', default=None)
resource_id_var: ContextVar[Optional[str]] = ContextVar('resource_id', default=None)


class SecretMasker:
    """Masks sensitive information in log messages."""

    def __init__(self):
        """Initialize secret masker with patterns."""
        self.patterns = [
            # Client secrets
            r'(?i)(client_secret)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{8,})["\']?',
            # Spotify access and refresh tokens
            r'(?i)(access_token|refresh_token)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{20,})["\']?',
            # PKCE verifiers and OAuth codes
            r'(?i)(code_verifier|code)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{20,})["\']?',
            # Bearer tokens in headers
            r'(?i)(bearer)[\s]+["\']?([a-zA-Z0-9\-_\.]{20,})["\']?',
        ]

        self.compiled_patterns = [re.compile(pattern) for pattern in self.patterns]

    def mask_secrets(self, text: str) -> str:
        """Mask sensitive information in text."""
        if not text:
            return text

        masked_text = text

        for pattern in self.compiled_patterns:
            def replace_match(match):
                prefix = match.group(1)
                secret = match.group(2)
                # Keep first 4 and last 4 characters, mask the rest
                if len(secret) > 8:
                    masked_secret = secret[:4] + '*' * (len(secret) - 8) + secret[-4:]
                else:
                    masked_secret = '*' * len(secret)
                return f"{prefix}: {masked_secret}"

            masked_text = pattern.sub(replace_match, masked_text)

        return masked_text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive information in dictionary."""
        if not data:
            return data

        masked_data = {}

        for key, value in data.items():
            if isinstance(value, str):
                masked_data[key] = self.mask_secrets(value)
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [self.mask_dict(item) if isinstance(item, dict)
                                    else self.mask_secrets(item) if isinstance(item, str)
                                    else item for item in value]
            else:
                masked_data[key] = value

        return masked_data


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self):
        """Initialize formatter."""
        super().__init__()
        self.masker = SecretMasker()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        operation = operation_var.get()
        resource_type = resource_type_var.get()
        resource_id = resource_id_var.get()

        log_entry = {
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': self.mask_secrets(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add correlation fields if available
        if operation:
            log_entry['operation'] = operation
        if resource_type:
            log_entry['resourceType'] = resource_type
        if resource_id:
            log_entry['resourceId'] = resource_id

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if getattr(record, 'fields', None):
            log_entry['fields'] = self.masker.mask_dict(record.fields)

        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def mask_secrets(self, text: str) -> str:
        """Mask secrets in text."""
        return self.masker.mask_secrets(text)


class CorrelationContext:
    """Context manager binding the adapter operation and its target resource to log records."""

    def __init__(self, operation: Optional[str] = None,
                 resource_type: Optional[str] = None,
                 resource_id: Optional[str] = None):
        """Initialize correlation context."""
        self.operation = operation
        self.resource_type = resource_type
        self.resource_id = resource_id
        self._tokens = []

    def __enter__(self):
        """Set correlation context."""
        if self.operation is not None:
            self._tokens.append((operation_var, operation_var.set(self.operation)))
        if self.resource_type is not None:
            self._tokens.append((resource_type_var, resource_type_var.set(self.resource_type)))
        if self.resource_id is not None:
            self._tokens.append((resource_id_var, resource_id_var.set(self.resource_id)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore correlation context."""
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()


def setup_logging(level: str = 'INFO',
                  log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging for the ``musix`` logger tree."""
    logger = logging.getLogger('musix')
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_with_fields(logger: logging.Logger, level: str, message: str,
                    fields: Optional[Dict[str, Any]] = None, exc_info=None, **kwargs):
    """Log message with additional fields."""
    merged = dict(fields or {})
    merged.update(kwargs)
    extra = {'fields': merged} if merged else None
    logger.log(getattr(logging, level.upper()), message, exc_info=exc_info, extra=extra)


def log_token_refresh(logger: logging.Logger, operation: str, resource_type: str,
                      resource_id: str, **kwargs):
    """Log the cached-token invalidation that precedes the single 401 retry."""
    with CorrelationContext(operation=operation, resource_type=resource_type,
                            resource_id=resource_id):
        log_with_fields(logger, 'WARNING',
                        'Credentials rejected, clearing cached token and retrying once',
                        {'status': 401, **kwargs})


def log_classified_error(logger: logging.Logger, operation: str, error: Exception,
                         status: Optional[int] = None, attempt: int = 1, **kwargs):
    """Log the adapter error chosen for a provider failure."""
    with CorrelationContext(operation=operation):
        log_with_fields(logger, 'DEBUG', 'Provider call failed', {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'status': status,
            'attempt': attempt,
            **kwargs
        })


def log_error(logger: logging.Logger, message: str, error: Exception, **kwargs):
    """Log error with exception details."""
    log_with_fields(logger, 'ERROR', message, {
        'error_type': type(error).__name__,
        'error_message': str(error),
        **kwargs
    }, exc_info=error)

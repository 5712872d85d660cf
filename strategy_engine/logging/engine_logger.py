"""Engine logger with structured context and credential masking."""
import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from strategy_engine.config.models import LoggingConfig


class EngineLogger:
    """Logger for the strategy engine with structured logging and credential protection."""

    # Patterns to detect and mask sensitive information
    SENSITIVE_PATTERNS = [
        (re.compile(r'(api[_-]?key["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(api[_-]?token["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(bearer\s+)([a-zA-Z0-9_\-\.]+)', re.IGNORECASE), r'\1***MASKED***'),
    ]

    SENSITIVE_KEYS = ['key', 'secret', 'password', 'token']

    def __init__(self, config: LoggingConfig):
        """Initialize the engine logger.

        Args:
            config: Logging configuration
        """
        self.config = config
        level = getattr(logging, config.level.upper())
        self.logger = logging.getLogger('StrategyEngine')
        self.logger.setLevel(level)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            config.file_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

    def _mask_sensitive_data(self, message: str) -> str:
        masked_message = message
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            masked_message = pattern.sub(replacement, masked_message)
        return masked_message

    def _format_context(self, context: Optional[Dict[str, Any]]) -> str:
        if not context:
            return ""

        context_parts = []
        for key, value in context.items():
            if any(sensitive in key.lower() for sensitive in self.SENSITIVE_KEYS):
                value = '***MASKED***'
            context_parts.append(f"{key}={value}")

        return " | " + " | ".join(context_parts) if context_parts else ""

    def _compose(self, message: str, context: Optional[Dict[str, Any]],
                 error: Optional[Exception] = None) -> str:
        text = f"{self._mask_sensitive_data(message)}{self._format_context(context)}"
        if error is not None:
            text += self._mask_sensitive_data(f" | Error: {type(error).__name__}: {error}")
        return text

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log an info message.

        Args:
            message: Log message
            context: Optional context dictionary for structured data
        """
        self.logger.info(self._compose(message, context))

    def log_warning(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log a warning message.

        Args:
            message: Log message
            context: Optional context dictionary for structured data
        """
        self.logger.warning(self._compose(message, context))

    def log_debug(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.logger.debug(self._compose(message, context))

    def log_error(self, message: str, error: Optional[Exception] = None,
                  context: Optional[Dict[str, Any]] = None):
        """Log an error message.

        Args:
            message: Log message
            error: Optional exception object
            context: Optional context dictionary for structured data
        """
        self.logger.error(self._compose(message, context, error), exc_info=error is not None)

    def log_critical(self, message: str, error: Optional[Exception] = None,
                     context: Optional[Dict[str, Any]] = None):
        """Log a critical error message.

        Critical errors indicate a defect in the calculation logic rather
        than a market condition, e.g. a violated result invariant.

        Args:
            message: Log message
            error: Optional exception object
            context: Optional context dictionary for structured data
        """
        self.logger.critical(self._compose(message, context, error), exc_info=error is not None)

    def log_calculation(self, result) -> None:
        """Log a one-line summary of a strategy result.

        Args:
            result: StrategyResult to summarize
        """
        strikes = "/".join(f"{leg.strike:g}" for leg in result.legs)
        message = (
            f"Calculated {result.strategy_type.value}: {result.symbol} | "
            f"Strikes={strikes} | "
            f"Breakevens=${result.lower_breakeven:.2f}-${result.upper_breakeven:.2f} | "
            f"Max Loss={result.max_loss} | "
            f"Max Profit={'Unlimited' if result.max_profit is None else f'${result.max_profit:.2f}'}"
        )
        if result.net_debit is not None:
            message += f" | Net Debit=${result.net_debit:.2f}"
        if result.net_credit is not None:
            message += f" | Net Credit=${result.net_credit:.2f}"
        self.log_info(message)

# Infrastructure module - Logging and configuration
# Explicitly initialized by the entry point; nothing is configured on import

from .logging import (
    get_logger, configure_logging, shutdown_logging, OperationContext,
    get_op_id, generate_op_id, get_log_file_path,
)
from .config import ConfigManager, RouterConfig, load_config

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "shutdown_logging",
    "OperationContext",
    "get_op_id",
    "generate_op_id",
    "get_log_file_path",
    # Config
    "ConfigManager",
    "RouterConfig",
    "load_config",
]

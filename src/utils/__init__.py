"""Logging and HTTP helpers shared by the Tastelog services."""

from src.utils.http_client import close_all_clients, get_api_client
from src.utils.logging import LogContext, setup_logging

__all__ = ["LogContext", "setup_logging", "close_all_clients", "get_api_client"]

from docscan.config.settings import settings
from docscan.config.logger_config import logger

__all__ = ["settings", "logger"]

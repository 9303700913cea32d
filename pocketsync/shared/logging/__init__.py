from pocketsync.shared.logging.logger import get_logger, setup_logging

__all__ = ["setup_logging", "get_logger"]

"""
Utility modules for the Rust toolchain provisioner.
"""

from .logging import setup_root_logger, get_logger

__all__ = ["setup_root_logger", "get_logger"]

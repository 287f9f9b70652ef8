"""
Rust toolchain provisioner.
"""

__version__ = "1.0.0"

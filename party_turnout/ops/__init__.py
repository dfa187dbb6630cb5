"""
Operations package for the party system / turnout pipeline

Configuration management and the pipeline CLI. The Config class is exposed
at the package level:
    from party_turnout.ops import Config
"""

from .config_loader import Config

__all__ = ["Config"]

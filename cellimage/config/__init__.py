"""
Config Module — Encoder settings from the environment.
"""

from .loader import EncoderConfig, load_config

__all__ = ["EncoderConfig", "load_config"]

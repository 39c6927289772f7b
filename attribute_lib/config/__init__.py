from .config import AttributeConfig, load_config

__all__ = ["AttributeConfig", "load_config"]

from study_partner.core.config import get_config
from study_partner.core.logging import setup_logging

__all__ = ["get_config", "setup_logging"]

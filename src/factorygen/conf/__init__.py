from .defaults import DEFAULTS
from .models import GeneratorConfig
from .settings import CONFIG_ENVVAR, Settings

__all__ = ["DEFAULTS", "CONFIG_ENVVAR", "GeneratorConfig", "Settings"]

from .loader import load_repair_config
from .models import FitnessConfig, OracleConfig, RepairConfig, SearchConfig, SourceConfig

__all__ = [
    "load_repair_config",
    "FitnessConfig",
    "OracleConfig",
    "RepairConfig",
    "SearchConfig",
    "SourceConfig",
]

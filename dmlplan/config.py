from __future__ import annotations
from dataclasses import dataclass
import yaml
from pathlib import Path

from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ViewerConfig:
    """DirectML plan reader configuration."""
    # Plan and config file
    plan: str = ""
    config_file: str = ""

    # Reporting
    report_dir: str = "out/default_run"

    # Recognition
    plan_suffix: str = "dmlplan.json"

    # Type string reported for buffers whose real type is not propagated
    placeholder_type: str = "float32[1,3,256,256]"

    barrier_name: str = "Global UAV Barrier"

    log_level: str = "INFO"

    def __post_init__(self):
        self.log_level = self.log_level.upper()

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        with open(yaml_path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}
        for key, value in yaml_config.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                logger.warning("Ignoring unknown config key '%s' in %s", key, yaml_path)

    @classmethod
    def from_args(cls, args) -> ViewerConfig:
        """Factory method to create a ViewerConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from YAML config file if provided
        if hasattr(args, 'config') and args.config:
            config.config_file = args.config
            if Path(config.config_file).exists():
                config.update_from_yaml(config.config_file)
            else:
                logger.warning("Config file %s not found.", config.config_file)

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        config.__post_init__()
        return config

import yaml
import argparse
from pathlib import Path
from dmlplan.config import ViewerConfig


def test_config_defaults():
    config = ViewerConfig()

    assert config.plan_suffix == "dmlplan.json"
    assert config.placeholder_type == "float32[1,3,256,256]"
    assert config.barrier_name == "Global UAV Barrier"
    assert config.log_level == "INFO"


def test_config_yaml_loading(tmp_path: Path):
    """Tests that config is loaded correctly from a YAML file."""
    yaml_content = {
        'placeholder_type': 'float16[1,8]',
        'report_dir': str(tmp_path / "reports"),
        'log_level': 'debug',
    }
    yaml_file = tmp_path / "test.yaml"
    with open(yaml_file, 'w') as f:
        yaml.dump(yaml_content, f)

    # Simulate args parsed from CLI, where only config and plan are provided
    args = argparse.Namespace(config=str(yaml_file), plan="model.dmlplan.json", report_dir=None, log_level=None)

    config = ViewerConfig.from_args(args)

    assert config.placeholder_type == 'float16[1,8]'
    assert config.report_dir == str(tmp_path / "reports")
    assert config.log_level == 'DEBUG'
    assert config.plan == "model.dmlplan.json"
    assert config.config_file == str(yaml_file)


def test_config_cli_override(tmp_path: Path):
    """Tests that CLI arguments override YAML settings."""
    yaml_content = {
        'report_dir': 'from_yaml',
        'barrier_name': 'UAV',
    }
    yaml_file = tmp_path / "test.yaml"
    with open(yaml_file, 'w') as f:
        yaml.dump(yaml_content, f)

    args = argparse.Namespace(
        config=str(yaml_file),
        plan="model.dmlplan.json",
        report_dir="from_cli",  # Override
    )

    config = ViewerConfig.from_args(args)

    assert config.report_dir == 'from_cli'  # Overridden value
    assert config.barrier_name == 'UAV'     # Value from YAML


def test_config_missing_file_and_unknown_keys(tmp_path: Path):
    # given
    yaml_file = tmp_path / "extra.yaml"
    yaml_file.write_text("bogus_key: 1\nbarrier_name: B\n")
    # when
    config = ViewerConfig()
    config.update_from_yaml(str(yaml_file))
    missing = ViewerConfig.from_args(argparse.Namespace(config=str(tmp_path / "absent.yaml")))
    # then
    assert config.barrier_name == "B"
    assert not hasattr(config, "bogus_key")
    assert missing.config_file.endswith("absent.yaml")
    assert missing.report_dir == "out/default_run"

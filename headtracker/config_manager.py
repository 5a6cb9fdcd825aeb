#!/usr/bin/env python3
"""
Configuration Management Module
Loads, merges and validates head tracker configuration files
"""

import copy
import json
import os
import shutil
from datetime import datetime
from typing import Any, Dict, List, Optional

from .types import CHANNEL_ORDERS

DEFAULT_CONFIG: Dict[str, Any] = {
    "model": {
        "path": "models/yolo11n-pose.onnx",
        "backend": "onnxruntime",
        "input_width": 640,
        "input_height": 640,
        "input_name": None,
        "providers": ["CPUExecutionProvider"],
    },
    "tracking": {
        # Mirrored control sense with a 0.4 threshold; the unmirrored
        # variant used 0.5. Both are overridable.
        "confidence_threshold": 0.4,
        "mirror_output": True,
        "initial_position": 0.5,
        "frame_skip": 2,
    },
    "preprocessing": {
        "source_channel_order": "BGR",
        "flip_horizontal": False,
        "interpolation": "linear",
    },
    "camera": {
        "source": 0,
        "width": None,
        "height": None,
    },
    "display": {
        "show_preview": False,
        "window_name": "Head Tracker",
        "print_interval": 15,
    },
}


class ConfigManager:
    """Configuration manager for the head tracker"""

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        load_file: bool = True,
    ):
        """
        Initialize configuration manager
        Args:
            config_path: Path to configuration file
            overrides: Nested values applied on top of the file
            load_file: Read config_path if it exists
        """
        self.config_path = config_path or "config.json"
        self.config = self._get_default_config()

        if load_file and os.path.exists(self.config_path):
            self.load_config()

        if overrides:
            self._deep_update(self.config, overrides)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return copy.deepcopy(DEFAULT_CONFIG)

    def load_config(self) -> bool:
        """
        Load configuration from file
        Returns:
            True if loaded successfully
        """
        loaded_config = load_config_file(self.config_path)
        if loaded_config is None:
            return False

        self._deep_update(self.config, loaded_config)
        print(f"Configuration loaded from {self.config_path}")
        return True

    def save_config(self) -> bool:
        """
        Save current configuration to file, keeping a timestamped backup
        of any file it replaces.
        Returns:
            True if saved successfully
        """
        try:
            if os.path.exists(self.config_path):
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                backup_path = f"{self.config_path}.backup.{timestamp}"
                shutil.copy2(self.config_path, backup_path)
                print(f"📁 Backup created: {backup_path}")

            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)

            print(f"Configuration saved to {self.config_path}")
            return True

        except OSError as e:
            print(f"Error saving configuration: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value
        Args:
            key: Configuration key (supports dot notation, e.g., 'tracking.frame_skip')
            default: Default value if key not found
        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """
        Set configuration value
        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config or not isinstance(config[k], dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def validation_errors(self) -> List[str]:
        """Return a list of human-readable problems with the current values."""
        errors = []

        for key in ("model.input_width", "model.input_height"):
            value = self.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(f"{key} must be a positive integer")

        if self.get("model.backend") not in ("onnxruntime", "opencv"):
            errors.append("model.backend must be 'onnxruntime' or 'opencv'")

        if not self.get("model.path"):
            errors.append("model.path must be set")

        threshold = self.get("tracking.confidence_threshold")
        if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 1:
            errors.append("tracking.confidence_threshold must be between 0 and 1")

        initial = self.get("tracking.initial_position")
        if not isinstance(initial, (int, float)) or not 0 <= initial <= 1:
            errors.append("tracking.initial_position must be between 0 and 1")

        frame_skip = self.get("tracking.frame_skip")
        if not isinstance(frame_skip, int) or isinstance(frame_skip, bool) or frame_skip < 1:
            errors.append("tracking.frame_skip must be an integer >= 1")

        if self.get("preprocessing.source_channel_order") not in CHANNEL_ORDERS:
            errors.append(f"preprocessing.source_channel_order must be one of {', '.join(CHANNEL_ORDERS)}")

        if self.get("preprocessing.interpolation") not in ("nearest", "linear", "area"):
            errors.append("preprocessing.interpolation must be 'nearest', 'linear' or 'area'")

        return errors

    def validate_config(self) -> bool:
        """
        Validate configuration values
        Returns:
            True if configuration is valid
        """
        errors = self.validation_errors()

        model_path = self.get("model.path")
        if model_path and not os.path.exists(model_path):
            print(f"Warning: Pose model does not exist yet: {model_path}")

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def print_config(self):
        """Print current configuration"""
        print("=== Current Configuration ===")
        self._print_dict(self.config, indent=0)

    def _print_dict(self, d: Dict, indent: int):
        for key, value in d.items():
            if isinstance(value, dict):
                print("  " * indent + f"{key}:")
                self._print_dict(value, indent + 1)
            else:
                print("  " * indent + f"{key}: {value}")


def load_config_file(config_path: str) -> Optional[Dict]:
    """
    Load configuration from file
    Args:
        config_path: Path to configuration file
    Returns:
        Configuration dictionary or None if failed
    """
    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error loading config file {config_path}: {e}")
        return None

    if not isinstance(data, dict):
        print(f"Error loading config file {config_path}: top level must be an object")
        return None
    return data

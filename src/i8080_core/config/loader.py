import logging
from typing import Dict, Any

import yaml

from i8080_core.core.errors import ConfigError
from .models import SystemConfig, ProgramImage, CpuInitialState

logger = logging.getLogger(__name__)

SUPPORTED_ARCHITECTURES = ("8080",)
FLAG_POLICIES = ("preserve", "clear")
TRAP_POLICIES = ("halt", "skip", "raise")
IMAGE_FORMATS = ("binary", "ihex")
REGISTER_NAMES = ("a", "b", "c", "d", "e", "h", "l")


# @intent:responsibility YAMLのシステム構成を読み込み、SystemConfigに変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        logger.debug("Loaded configuration from %s", path)
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping.")

        arch = str(data.get("architecture", "8080"))
        if arch not in SUPPORTED_ARCHITECTURES:
            raise ConfigError(f"Unsupported architecture: {arch}")

        flag_policy = self._parse_choice(data, "flag_policy", "preserve", FLAG_POLICIES)
        trap_policy = self._parse_choice(data, "trap_policy", "halt", TRAP_POLICIES)

        max_steps = data.get("max_steps")
        if max_steps is not None:
            max_steps = self._parse_int(max_steps)
            if max_steps <= 0:
                raise ConfigError(f"max_steps must be positive: {max_steps}")

        # Parse Program Images
        programs = []
        for image_data in data.get("programs", []):
            image_format = image_data.get("format", "binary")
            if image_format not in IMAGE_FORMATS:
                raise ConfigError(f"Unknown image format: {image_format}")
            if "path" not in image_data:
                raise ConfigError("Program image entry requires a 'path'.")
            programs.append(ProgramImage(
                path=image_data["path"],
                address=self._parse_int(image_data.get("address", 0)),
                format=image_format
            ))

        # Parse Initial State
        initial_state_data = data.get("initial_state", {})
        registers = {}
        for reg_name, value in initial_state_data.get("registers", {}).items():
            name = str(reg_name).lower()
            if name not in REGISTER_NAMES:
                raise ConfigError(f"Unknown register in initial_state: {reg_name}")
            registers[name] = self._parse_int(value)
        flags = initial_state_data.get("flags")
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0)),
            registers=registers,
            flags=self._parse_int(flags) if flags is not None else None,
            int_enable=1 if initial_state_data.get("int_enable", False) else 0
        )

        return SystemConfig(
            architecture=arch,
            flag_policy=flag_policy,
            trap_policy=trap_policy,
            max_steps=max_steps,
            programs=programs,
            initial_state=initial_state
        )

    def _parse_choice(self, data: Dict[str, Any], key: str, default: str, choices) -> str:
        value = str(data.get(key, default)).lower()
        if value not in choices:
            raise ConfigError(f"Invalid {key}: {value} (expected one of {', '.join(choices)})")
        return value

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                raise ConfigError(f"Invalid integer format: {value}") from None
        raise ConfigError(f"Invalid integer format: {value}")

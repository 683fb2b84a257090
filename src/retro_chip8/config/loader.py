import yaml
from typing import Dict, Any, Optional
from .models import SystemConfig, MachineConfig, DisplayConfig, DEFAULT_KEYMAP

# @intent:constant 設定ファイルで認識されるトップレベルのセクション名。
KNOWN_SECTIONS = ("machine", "display", "keymap")

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {})

    # @intent:responsibility YAMLから読み込んだ辞書をSystemConfigに変換します。
    # @intent:rationale 未知のセクションやキー割り当ての誤りは警告にとどめ、値の型や範囲の誤りはValueErrorとします。
    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping, got {type(data).__name__}")

        for section in data:
            if section not in KNOWN_SECTIONS:
                print(f"Warning: Unknown configuration section '{section}' ignored")

        # Parse Machine
        machine_data = data.get("machine") or {}
        machine = MachineConfig(
            instructions_per_frame=self._parse_positive(machine_data.get("instructions_per_frame", 12), "instructions_per_frame"),
            timer_hz=self._parse_positive(machine_data.get("timer_hz", 60), "timer_hz"),
            seed=self._parse_optional_int(machine_data.get("seed")),
        )

        # Parse Display
        display_data = data.get("display") or {}
        display = DisplayConfig(
            scale=self._parse_positive(display_data.get("scale", 10), "scale"),
            foreground=str(display_data.get("foreground", "#33FF66")),
            background=str(display_data.get("background", "#101010")),
        )

        keymap = self._parse_keymap(data.get("keymap"))

        return SystemConfig(machine=machine, display=display, keymap=keymap)

    # @intent:responsibility キー割り当て（ホストキー文字 -> CHIP-8キー番号）を解析します。
    def _parse_keymap(self, keymap_data: Optional[Dict[Any, Any]]) -> Dict[str, int]:
        if not keymap_data:
            return dict(DEFAULT_KEYMAP)

        keymap: Dict[str, int] = {}
        for host_key, chip_key in keymap_data.items():
            try:
                value = self._parse_int(chip_key)
            except ValueError:
                print(f"Warning: Invalid key mapping '{host_key}: {chip_key}' ignored")
                continue
            if not 0 <= value <= 0xF:
                print(f"Warning: Key mapping '{host_key}' targets {value}, outside 0-15; ignored")
                continue
            keymap[str(host_key).upper()] = value
        return keymap

    def _parse_positive(self, value: Any, name: str) -> int:
        parsed = self._parse_int(value)
        if parsed <= 0:
            raise ValueError(f"'{name}' must be a positive integer: {value}")
        return parsed

    def _parse_optional_int(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return self._parse_int(value)

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")

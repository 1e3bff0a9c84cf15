"""
配置模型
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from modkeeper.exceptions import ConfigValidationError

DEFAULT_GAME_DIRECTORY = "C:\\Program Files (x86)\\Steam\\steamapps\\common\\Spin Rhythm"
DEFAULT_OWNER = "SRXDModdingGroup"
DEFAULT_PLUGINS_SUBDIR = "BepInEx/plugins"
DEFAULT_API_BASE_URL = "https://api.github.com"


@dataclass
class ModKeeperConfig:
    """ModKeeper 配置"""

    game_directory: str = DEFAULT_GAME_DIRECTORY
    plugins_subdir: str = DEFAULT_PLUGINS_SUBDIR
    default_owner: str = DEFAULT_OWNER
    max_concurrent: int = 5
    max_resolve_rounds: int = 8
    github_token: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    log_file: Optional[str] = None

    @property
    def plugins_directory(self) -> str:
        """模组安装目录"""
        return os.path.join(self.game_directory.strip(), *self.plugins_subdir.split("/"))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ModKeeperConfig":
        """
        从配置字典创建配置对象

        同时接受 snake_case 与原配置文件中的 camelCase 键（如 gameDirectory）。
        """
        data = dict(data or {})
        if "gameDirectory" in data and "game_directory" not in data:
            data["game_directory"] = data.pop("gameDirectory")

        config = cls(
            game_directory=str(data.get("game_directory", DEFAULT_GAME_DIRECTORY)),
            plugins_subdir=str(data.get("plugins_subdir", DEFAULT_PLUGINS_SUBDIR)),
            default_owner=str(data.get("default_owner", DEFAULT_OWNER)),
            max_concurrent=data.get("max_concurrent", 5),
            max_resolve_rounds=data.get("max_resolve_rounds", 8),
            github_token=data.get("github_token") or os.environ.get("GITHUB_TOKEN"),
            api_base_url=str(data.get("api_base_url", DEFAULT_API_BASE_URL)).rstrip("/"),
            log_file=data.get("log_file"),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """校验配置"""
        if not self.game_directory.strip():
            raise ConfigValidationError("game_directory 不能为空")

        for key in ("max_concurrent", "max_resolve_rounds"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigValidationError(
                    f"{key} 必须为正整数", context={key: value}
                )

        if not self.default_owner.strip() or "/" in self.default_owner:
            raise ConfigValidationError(
                "default_owner 无效", context={"default_owner": self.default_owner}
            )

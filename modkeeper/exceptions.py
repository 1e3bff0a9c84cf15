"""
ModKeeper 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
解析器与下载协调器把这些异常视为单个模组的非致命失败。
"""

from typing import Any, Dict, Optional

import aiohttp


class ModKeeperError(Exception):
    """ModKeeper 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# ---------------------------------------------------------------- 配置


class ConfigError(ModKeeperError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


# ---------------------------------------------------------------- 解析


class ParseError(ModKeeperError):
    """字符串或文档解析错误"""

    def _get_default_code(self) -> str:
        return "E200"


class AddressParseError(ParseError):
    """仓库地址格式错误"""

    def _get_default_code(self) -> str:
        return "E201"


class VersionParseError(ParseError):
    """版本号格式错误"""

    def _get_default_code(self) -> str:
        return "E202"


class ManifestError(ParseError):
    """manifest 校验失败"""

    def _get_default_code(self) -> str:
        return "E210"


class ManifestDecodeError(ManifestError):
    """manifest 无法反序列化"""

    def _get_default_code(self) -> str:
        return "E211"


class ManifestNameError(ManifestError):
    """manifest 缺少名称"""

    def _get_default_code(self) -> str:
        return "E212"


class ManifestVersionError(ManifestError):
    """manifest 版本无效"""

    def _get_default_code(self) -> str:
        return "E213"


class ManifestRepositoryError(ManifestError):
    """manifest 仓库地址无效"""

    def _get_default_code(self) -> str:
        return "E214"


class ManifestDependencyError(ManifestError):
    """manifest 中存在无效依赖"""

    def _get_default_code(self) -> str:
        return "E215"


# ---------------------------------------------------------------- 未找到


class NotFoundError(ModKeeperError):
    """资源不存在"""

    def _get_default_code(self) -> str:
        return "E300"


class DirectoryNotFoundError(NotFoundError):
    """目录不存在"""

    def _get_default_code(self) -> str:
        return "E301"


class AssetNotFoundError(NotFoundError):
    """发布中缺少所需的资源文件"""

    def _get_default_code(self) -> str:
        return "E302"


class ManifestNotFoundError(NotFoundError):
    """压缩包根目录缺少 manifest.json"""

    def _get_default_code(self) -> str:
        return "E303"


class ModNotFoundError(NotFoundError):
    """本地没有该名称的模组"""

    def _get_default_code(self) -> str:
        return "E304"


# ---------------------------------------------------------------- API


class APIError(ModKeeperError):
    """API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E400"


class APINotFoundError(APIError):
    """API 资源不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class APIRateLimitError(APIError):
    """API 速率限制"""

    def _get_default_code(self) -> str:
        return "E429"


class APIServerError(APIError):
    """API 服务器错误"""

    def _get_default_code(self) -> str:
        return "E450"


# ---------------------------------------------------------------- 一致性


class VersionMismatchError(ModKeeperError):
    """manifest 版本与发布标签不一致"""

    def _get_default_code(self) -> str:
        return "E501"


# ---------------------------------------------------------------- 安装


class InstallError(ModKeeperError):
    """安装相关错误"""

    def _get_default_code(self) -> str:
        return "E600"


class InstallFileError(InstallError):
    """解压或移动文件时发生 I/O 错误"""

    def _get_default_code(self) -> str:
        return "E601"


__all__ = [
    "ModKeeperError",
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    "ParseError",
    "AddressParseError",
    "VersionParseError",
    "ManifestError",
    "ManifestDecodeError",
    "ManifestNameError",
    "ManifestVersionError",
    "ManifestRepositoryError",
    "ManifestDependencyError",
    "NotFoundError",
    "DirectoryNotFoundError",
    "AssetNotFoundError",
    "ManifestNotFoundError",
    "ModNotFoundError",
    "APIError",
    "APINotFoundError",
    "APIRateLimitError",
    "APIServerError",
    "VersionMismatchError",
    "InstallError",
    "InstallFileError",
]

"""
CLI 模块

命令行接口实现。
"""

import asyncio
import json
from functools import wraps
from pathlib import Path
from typing import List, Optional

import click
import toml
import yaml
from loguru import logger

from modkeeper import __version__
from modkeeper.download import DownloadResult
from modkeeper.exceptions import ConfigParseError, DirectoryNotFoundError, ModKeeperError
from modkeeper.logger import setup_logger
from modkeeper.models import ModKeeperConfig
from modkeeper.orchestrator import ModKeeperOrchestrator, UpdateCheck

DEFAULT_CONFIG = "modkeeper.toml"


def load_config(config_path: Optional[str]) -> dict:
    """加载配置文件，文件不存在时返回空配置"""
    if not config_path:
        return {}

    path = Path(config_path)
    if not path.exists():
        logger.warning(f"配置文件不存在: {config_path}，使用默认配置")
        return {}

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            return toml.load(config_path)
        elif suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"无法解析配置文件 {config_path}: {e}", context={"path": config_path}
        )

    raise ConfigParseError(
        f"不支持的配置文件格式: {suffix}", context={"path": config_path}
    )


def run_command(func):
    """以异步方式运行命令，并把库异常转换为 click 错误"""

    @wraps(func)
    def wrapper(ctx: click.Context, *args, **kwargs):
        async def runner():
            async with ModKeeperOrchestrator(ctx.obj["config"]) as orchestrator:
                try:
                    orchestrator.refresh()
                except DirectoryNotFoundError as e:
                    logger.warning(f"刷新模组失败: {e}")
                await func(orchestrator, *args, **kwargs)

        try:
            asyncio.run(runner())
        except ModKeeperError as e:
            logger.debug(f"命令失败: {e.to_dict()}")
            raise click.ClickException(str(e))

    return click.pass_context(wrapper)


def echo_results(results: List[DownloadResult]):
    if not results:
        click.echo("没有需要下载的模组")
        return
    for result in results:
        if result.success:
            click.echo(f"成功下载 {result.mod}")
        else:
            click.echo(f"下载 {result.address} 的模组失败: {result.error}")


def echo_check(check: UpdateCheck, verbose: bool = True):
    if check.error is not None:
        click.echo(f"无法检查 {check.mod} 的更新: {check.error}")
    elif check.is_outdated:
        click.echo(f"{check.mod} 不是最新版本，最新版本为 {check.latest.version}")
    elif check.missing_dependencies:
        click.echo(f"{check.mod} 缺少依赖{':' if verbose else ''}")
        if verbose:
            for dependency in check.missing_dependencies:
                click.echo(f"  {dependency}")
    else:
        click.echo(f"{check.mod} 已是最新版本")


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    default=DEFAULT_CONFIG,
    show_default=True,
    help="配置文件路径 (toml/json/yaml)",
)
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, config_path: str, debug: bool):
    """ModKeeper - 游戏模组下载与依赖管理工具"""
    setup_logger(level="DEBUG" if debug else None)

    try:
        config = ModKeeperConfig.from_dict(load_config(config_path))
    except ModKeeperError as e:
        raise click.ClickException(f"配置错误: {e}")

    if config.log_file:
        setup_logger(level="DEBUG" if debug else None, log_file=config.log_file)

    logger.debug(f"使用游戏目录 {config.game_directory}")
    ctx.obj = {"config": config}


@main.command("list")
@run_command
async def list_mods(orchestrator: ModKeeperOrchestrator):
    """列出已安装的模组"""
    mods = orchestrator.get_installed_mods()
    if not mods:
        click.echo("没有找到模组")
        return
    click.echo(f"找到 {len(mods)} 个模组:")
    for mod in mods:
        click.echo(str(mod))


@main.command()
@click.argument("name", required=False)
@click.option("--all", "all_mods", is_flag=True, help="显示所有已安装模组的信息")
@run_command
async def info(orchestrator: ModKeeperOrchestrator, name: Optional[str], all_mods: bool):
    """显示模组的详细信息"""
    if all_mods or not name:
        mods = orchestrator.get_installed_mods()
        if not mods:
            click.echo("没有找到模组")
        for mod in mods:
            click.echo(f"{mod}: {mod.description}")
        return

    mod = orchestrator.get_mod(name)
    click.echo(f"{mod}: {mod.description}")
    for dependency in mod.dependencies:
        click.echo(f"  依赖 {dependency} ({dependency.source})")


@main.command()
@click.argument("name", required=False)
@click.option("--all", "all_mods", is_flag=True, help="检查所有已安装模组")
@run_command
async def check(orchestrator: ModKeeperOrchestrator, name: Optional[str], all_mods: bool):
    """检查模组是否有更新或缺失依赖"""
    if all_mods or not name:
        checks = await orchestrator.check_all_for_updates()
        for result in checks:
            if not result.up_to_date:
                echo_check(result, verbose=False)
        if all(result.up_to_date for result in checks):
            click.echo("所有模组都是最新版本")
        return

    echo_check(await orchestrator.check_for_update(name))


@main.command()
@click.argument("repository")
@click.option("-d", "--dependencies", is_flag=True, help="同时下载缺失的依赖")
@run_command
async def download(orchestrator: ModKeeperOrchestrator, repository: str, dependencies: bool):
    """
    从仓库的最新发布下载模组

    REPOSITORY 为 owner/name；属于默认组织的仓库只需给出名称。
    """
    echo_results(await orchestrator.download(repository, dependencies))


@main.command()
@click.argument("name", required=False)
@click.option("--all", "all_mods", is_flag=True, help="更新所有已安装模组")
@click.option("-d", "--dependencies", is_flag=True, help="同时下载缺失的依赖")
@run_command
async def update(
    orchestrator: ModKeeperOrchestrator,
    name: Optional[str],
    all_mods: bool,
    dependencies: bool,
):
    """在有新版本时更新模组"""
    if all_mods:
        results = await orchestrator.update_all(dependencies)
    elif not name:
        raise click.UsageError("请指定模组名称或使用 --all")
    else:
        results = await orchestrator.update(name, dependencies)
    echo_results(results)


if __name__ == "__main__":
    main()

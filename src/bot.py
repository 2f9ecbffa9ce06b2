import discord
from discord.ext import commands
import os
import asyncio
import pathlib
from typing import Optional
from dotenv import load_dotenv, find_dotenv
import logging
from src.core.logging_setup import setup_logging
from src.core.router import RouterTree, is_unclaimed_submission, handle_unclaimed_submission
from src.core.utils import load_id_from_env

# 使用 find_dotenv() 确保总能找到 .env 文件
load_dotenv(find_dotenv())
TOKEN = os.getenv('DISCORD_TOKEN')

logger = logging.getLogger(__name__)

class ContestBot(commands.Bot):
    def __init__(self):
        logger.info("--- ⌛ 0. 环境与配置加载 ---")
        # 只为一个服务器注册命令
        self.guild_id: Optional[int] = load_id_from_env('GUILD_ID')
        self.contest_channel_id: Optional[int] = load_id_from_env('CONTEST_CHANNEL_ID')
        self.result_channel_id: Optional[int] = load_id_from_env('RESULT_CHANNEL_ID')
        logger.info(
            f"目标服务器: {self.guild_id}，比赛频道: {self.contest_channel_id}，结果频道: {self.result_channel_id}"
        )

        # 斜杠命令、按钮和弹窗都不需要特权 intents
        intents = discord.Intents.default()
        super().__init__(command_prefix=commands.when_mentioned, intents=intents, tree_cls=RouterTree)

    async def setup_hook(self) -> None:
        """Bot 启动时执行的异步初始化：加载 Cogs 并同步命令。"""
        logger.info("--- 🧩 1. 加载功能模块 (Cogs) ---")
        await self.load_all_cogs()

        logger.info("--- 🛰️ 2. 同步应用命令 ---")
        await self.sync_guild_commands()

        self.list_loaded_commands()
        logger.info("--- 🎉 机器人核心已就绪,等待 Discord 连接成功...---")

    async def sync_guild_commands(self) -> bool:
        """把命令注册到配置的服务器。失败只记录日志，不中断启动。"""
        if self.guild_id is None:
            logger.error("未找到目标服务器 (GUILD_ID 未配置)，命令未注册。")
            return False

        guild = discord.Object(id=self.guild_id)
        try:
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
        except discord.HTTPException:
            logger.error(f"❌ 同步命令到服务器 {self.guild_id} 失败", exc_info=True)
            return False

        logger.info(f"✅ 命令已同步到服务器: {self.guild_id}")
        return True

    async def on_ready(self):
        logger.info(f"--- ✅ 已成功连接到 Discord ---,以 {self.user} (ID: {self.user.id}) 的身份登录-")

    async def on_interaction(self, interaction: discord.Interaction):
        """斜杠命令和按钮由命令树与视图分发，这里只兜底处理无人认领的弹窗提交。"""
        if is_unclaimed_submission(interaction):
            await handle_unclaimed_submission(self, interaction)

    async def close(self):
        """在机器人关闭时清理资源。父类会卸载所有 Cog，进行中的比赛计时随之取消。"""
        logger.info("正在关闭机器人并清理资源...")
        await super().close()
        logger.info("Discord 客户端已成功关闭。")

    async def load_all_cogs(self):
        """查找并加载 modules 下所有 'cogs' 子文件夹中的 Cog。"""
        project_root = pathlib.Path(__file__).parent.parent
        modules_root = project_root / "src" / "modules"

        for path in sorted(modules_root.rglob("cogs/*.py")):
            if path.name == "__init__.py" or path.name == "views.py":
                continue

            # 例如: .../src/modules/contest/cogs/contest_cog.py -> src.modules.contest.cogs.contest_cog
            module_path = ".".join(path.relative_to(project_root).parts).removesuffix(".py")
            try:
                await self.load_extension(module_path)
                logger.info(f"✅ 已加载: {module_path}")
            except Exception as e:
                logger.error(f"❌ 加载 {module_path} 失败: {e}", exc_info=True)

    def list_loaded_commands(self):
        """打印出所有已注册的应用命令。"""
        logger.info("--- 📋 已加载的应用命令 ---")
        commands = self.tree.get_commands()
        if not commands:
            logger.info("  未找到任何应用命令。")
        else:
            for command in commands:
                logger.info(f"  - /{command.name}")


async def main():
    setup_logging()

    if not TOKEN:
        logger.critical("错误：未在 .env 文件中找到 DISCORD_TOKEN。机器人无法启动。")
        return

    bot = ContestBot()

    try:
        await bot.start(TOKEN)
    except discord.errors.LoginFailure:
        logger.critical("错误：提供的 DISCORD_TOKEN 无效。请检查 .env 文件。")
    except Exception as e:
        logger.critical(f"机器人启动时发生致命错误: {e}", exc_info=True)
    finally:
        if not bot.is_closed():
            logger.info("检测到程序即将退出，正在优雅地关闭机器人...")
            await bot.close()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("程序已干净地退出。")

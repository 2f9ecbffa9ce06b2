# src/modules/contest/cogs/contest_cog.py

import discord
from discord.ext import commands
from discord import app_commands
import logging
import os
import pathlib
from typing import TYPE_CHECKING, Optional

from src.core.utils import resolve_channel
from src.modules.contest.models import Contest
from src.modules.contest.services.duration_parser import duration_parser
from src.modules.contest.services.notification_service import NotificationService
from .views import ContestView

if TYPE_CHECKING:
    from src.bot import ContestBot

logger = logging.getLogger(__name__)

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[4]
DEFAULT_LOGO_PATH = PROJECT_ROOT / 'assets' / 'petloverslogo.png'
DEFAULT_FOOTER_TEXT = 'Pet Lovers Development Team'

INVALID_DURATION_MESSAGE = 'Invalid time format. Please use a valid format (e.g., 1d, 1h, 1m).'
CHANNEL_UNAVAILABLE_MESSAGE = 'Contest channel is not available.'
CONTEST_STARTED_MESSAGE = 'Contest started!'


class ContestCog(commands.Cog):
    """
    /contest 命令：在比赛频道发布倒计时，收集参赛者的仓库链接直到时间结束。
    """

    def __init__(self, bot: "ContestBot"):
        self.bot = bot
        self.contest_channel_id: Optional[int] = bot.contest_channel_id
        self.notification_service = NotificationService(bot, bot.result_channel_id)
        self.logo_path = pathlib.Path(os.getenv('CONTEST_LOGO_PATH', str(DEFAULT_LOGO_PATH)))
        self.footer_text = os.getenv('CONTEST_FOOTER_TEXT', DEFAULT_FOOTER_TEXT)
        # 进行中的比赛，只用于卸载时取消计时
        self.active_views: set[ContestView] = set()

    async def cog_unload(self):
        """当 Cog 被卸载时，取消所有进行中的倒计时。"""
        for view in list(self.active_views):
            view.cancel()
        if self.active_views:
            logger.info(f"已取消 {len(self.active_views)} 个进行中的比赛倒计时。")
        self.active_views.clear()

    def forget(self, view: ContestView):
        self.active_views.discard(view)

    def _load_logo(self) -> Optional[discord.File]:
        if not self.logo_path.is_file():
            logger.warning(f"找不到比赛图标文件: {self.logo_path}，将不带图片发布。")
            return None
        return discord.File(self.logo_path, filename=self.logo_path.name)

    @app_commands.command(name="contest", description="Start a contest countdown.")
    @app_commands.describe(
        duration='Set the contest duration (e.g., 1d, 1h, 1m)',
        competition_link='Send the competition message link!'
    )
    @app_commands.rename(duration='time', competition_link='competitionmessagelink')
    @app_commands.default_permissions(administrator=True)
    @app_commands.guild_only()
    async def contest(self, interaction: discord.Interaction, duration: str, competition_link: str):
        await self.start_contest(interaction, duration, competition_link)

    async def start_contest(self, interaction: discord.Interaction, duration: str, competition_link: str):
        """处理 /contest 的核心逻辑。未捕获的异常交给命令树的 on_error。"""
        log_context = {
            'user_id': interaction.user.id,
            'guild_id': interaction.guild_id,
            'duration': duration
        }

        duration_ms = duration_parser.parse(duration)
        if not duration_ms:
            logger.info("比赛时长格式无效", extra=log_context)
            await interaction.response.send_message(INVALID_DURATION_MESSAGE, ephemeral=True)
            return

        contest_channel = await resolve_channel(self.bot, self.contest_channel_id, "比赛频道")
        if contest_channel is None:
            logger.error("比赛频道不可用，比赛未创建。", extra=log_context)
            await interaction.response.send_message(CHANNEL_UNAVAILABLE_MESSAGE, ephemeral=True)
            return

        contest = Contest.start(competition_link, duration_ms)
        logo = self._load_logo()
        view = ContestView(self, contest, self.footer_text, logo.filename if logo else None)

        send_kwargs = {'embed': view.create_embed(), 'view': view}
        if logo:
            send_kwargs['file'] = logo
        message = await contest_channel.send(**send_kwargs)

        view.start_timer(message)
        self.active_views.add(view)
        logger.info(
            "比赛已开始",
            extra={**log_context, 'message_id': message.id, 'end_timestamp': contest.end_timestamp}
        )

        await interaction.response.send_message(CONTEST_STARTED_MESSAGE, ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(ContestCog(bot))

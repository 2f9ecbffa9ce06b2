# src/core/router.py

import discord
from discord import app_commands
import logging
from typing import TYPE_CHECKING

from src.core.utils import resolve_channel, get_text_input_value

if TYPE_CHECKING:
    from src.bot import ContestBot

logger = logging.getLogger(__name__)

# 未带 nonce 的提交弹窗，没有任何收集器认领它，由路由器兜底处理
FALLBACK_MODAL_ID = 'github_modal'
GITHUB_LINK_FIELD_ID = 'githubLink'

COMMAND_ERROR_MESSAGE = 'There was an error executing this command.'
SUBMISSION_RECEIVED_MESSAGE = 'Your submission has been received!'


class RouterTree(app_commands.CommandTree):
    """
    命令树即命令注册表：启动时由各 Cog 填充，之后只读。
    这里重写 on_error，作为所有斜杠命令的统一失败边界。
    """

    async def on_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
        original = getattr(error, 'original', error)
        log_context = {
            'user_id': interaction.user.id if interaction.user else None,
            'guild_id': interaction.guild_id,
            'command': interaction.command.qualified_name if interaction.command else None
        }
        logger.error("执行斜杠命令时发生错误", extra=log_context, exc_info=original)

        # 只有在尚未响应时才能回复
        if interaction.response.is_done():
            return
        try:
            await interaction.response.send_message(COMMAND_ERROR_MESSAGE, ephemeral=True)
        except discord.HTTPException:
            logger.warning("无法向用户发送命令错误提示", extra=log_context, exc_info=True)


def is_unclaimed_submission(interaction: discord.Interaction) -> bool:
    """判断一个交互是否为需要兜底处理的弹窗提交。"""
    if interaction.type != discord.InteractionType.modal_submit:
        return False
    return (interaction.data or {}).get('custom_id') == FALLBACK_MODAL_ID


def build_submission_embed(user: discord.abc.User, github_link: str) -> discord.Embed:
    embed = discord.Embed(
        title='GitHub Submission',
        description=f'{user.mention} submitted the following GitHub repository:',
        color=0x00FF00,
        timestamp=discord.utils.utcnow()
    )
    embed.add_field(name='Repository Link', value=github_link)
    return embed


async def handle_unclaimed_submission(bot: "ContestBot", interaction: discord.Interaction) -> None:
    """
    把提交的仓库链接转发到结果频道，并私密确认。
    这里的任何错误只记录日志，不向用户另行提示。
    """
    log_context = {'user_id': interaction.user.id, 'guild_id': interaction.guild_id}
    try:
        github_link = get_text_input_value(interaction, GITHUB_LINK_FIELD_ID)
        if not github_link:
            logger.warning("兜底弹窗提交中缺少仓库链接字段", extra=log_context)
            return

        result_channel = await resolve_channel(bot, bot.result_channel_id, "结果频道")
        if result_channel is None:
            return

        await result_channel.send(embed=build_submission_embed(interaction.user, github_link))
        logger.info("已转发兜底弹窗提交", extra=log_context)

        if not interaction.response.is_done():
            await interaction.response.send_message(SUBMISSION_RECEIVED_MESSAGE, ephemeral=True)
    except Exception:
        logger.error("处理兜底弹窗提交时出错", extra=log_context, exc_info=True)

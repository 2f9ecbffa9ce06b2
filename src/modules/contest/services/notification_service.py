# src/modules/contest/services/notification_service.py

import discord
import logging
from typing import Optional
from src.core.utils import resolve_channel

logger = logging.getLogger(__name__)

class NotificationService:
    """
    负责向结果频道发送参赛与退赛通知。
    通知失败只记录日志，不影响比赛状态。
    """

    def __init__(self, bot: discord.Client, result_channel_id: Optional[int]):
        self.bot = bot
        self.result_channel_id = result_channel_id

    @staticmethod
    def build_participant_embed(user: discord.abc.User, github_link: str) -> discord.Embed:
        return discord.Embed(
            title='✅ New Participant',
            description=f'{user.mention} has joined the contest with their GitHub repository link: {github_link}',
            color=0x00FF00,
            timestamp=discord.utils.utcnow()
        )

    @staticmethod
    def build_withdrawal_embed(user: discord.abc.User) -> discord.Embed:
        return discord.Embed(
            title='❌ Withdrawal Notification',
            description=f'{user.mention} has withdrawn from the contest.',
            color=0xFF0000,
            timestamp=discord.utils.utcnow()
        )

    async def send_participant_notification(self, user: discord.abc.User, github_link: str) -> bool:
        return await self._send(self.build_participant_embed(user, github_link), user, "参赛通知")

    async def send_withdrawal_notification(self, user: discord.abc.User) -> bool:
        return await self._send(self.build_withdrawal_embed(user), user, "退赛通知")

    async def _send(self, embed: discord.Embed, user: discord.abc.User, kind: str) -> bool:
        log_context = {'user_id': user.id, 'channel_id': self.result_channel_id}

        result_channel = await resolve_channel(self.bot, self.result_channel_id, "结果频道")
        if result_channel is None:
            logger.warning(f"结果频道不可用，{kind}未发送。", extra=log_context)
            return False

        try:
            await result_channel.send(embed=embed)
        except discord.HTTPException:
            logger.error(f"发送{kind}失败。", extra=log_context, exc_info=True)
            return False

        logger.info(f"已发送{kind}。", extra=log_context)
        return True

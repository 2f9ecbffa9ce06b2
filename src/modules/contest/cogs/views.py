import discord
import asyncio
from discord import ui
import logging
from typing import TYPE_CHECKING, Optional

from src.modules.contest.models import Contest

if TYPE_CHECKING:
    from .contest_cog import ContestCog

logger = logging.getLogger(__name__)

ATTEND_BUTTON_ID = 'attend'
WITHDRAW_BUTTON_ID = 'unattend'
MODAL_ID_PREFIX = 'github_modal_'
GITHUB_LINK_FIELD_ID = 'githubLink'

COUNTDOWN_COLOR = 0x1E90FF
ENDED_COLOR = 0xFF0000

SUBMISSION_THANKS_MESSAGE = 'Thank you for submitting your GitHub link! You are now participating.'
SUBMISSION_FAILED_MESSAGE = 'Something went wrong while handling your submission.'
NOT_ATTENDING_MESSAGE = 'You are not currently attending.'
WITHDRAWN_MESSAGE = 'You have withdrawn from the contest.'
GENERIC_ERROR_MESSAGE = 'There was an error executing this command.'


class GithubLinkModal(ui.Modal):
    """
    参赛弹窗。custom_id 带上触发点击的交互ID，
    这样同一条比赛消息上同时打开的多个弹窗不会互相串号。
    """

    def __init__(self, nonce: str, timeout: float):
        super().__init__(title='GitHub Repository Submission', timeout=timeout, custom_id=f'{MODAL_ID_PREFIX}{nonce}')
        self.github_link = ui.TextInput(
            label='Enter your GitHub repository link:',
            custom_id=GITHUB_LINK_FIELD_ID,
            style=discord.TextStyle.short,
            required=True
        )
        self.add_item(self.github_link)
        self.submission: Optional[discord.Interaction] = None

    async def on_submit(self, interaction: discord.Interaction):
        # 由发起点击的流程负责响应这次提交
        self.submission = interaction
        self.stop()

    async def wait_for_submission(self) -> Optional[discord.Interaction]:
        """等待提交；超时或被放弃时返回 None。"""
        timed_out = await self.wait()
        if timed_out:
            return None
        return self.submission


class ContestView(ui.View):
    """
    比赛消息上的参加/退出按钮，同时充当这条消息的收集器。
    视图自身不设超时（discord.py 的超时会在每次交互后重置），
    而是由一个固定时长的计时任务在比赛结束时收尾。
    """

    def __init__(self, cog: 'ContestCog', contest: Contest, footer_text: str, logo_filename: Optional[str] = None):
        super().__init__(timeout=None)
        self.cog = cog
        self.contest = contest
        self.footer_text = footer_text
        self.logo_filename = logo_filename
        self.message: Optional[discord.Message] = None
        self._end_task: Optional[asyncio.Task] = None
        self._finished = False

    # ----------------------------------------------------------------
    # Embeds
    # ----------------------------------------------------------------

    def create_embed(self) -> discord.Embed:
        contest = self.contest
        embed = discord.Embed(
            title='🕒 Contest Countdown',
            description=(
                f'This contest has been started [here]({contest.competition_link}). '
                'To attend, please press the attend button and link us your GitHub repository there.'
            ),
            color=ENDED_COLOR if contest.is_ended else COUNTDOWN_COLOR,
            timestamp=discord.utils.utcnow()
        )
        embed.add_field(name='End Time', value=f'<t:{contest.end_timestamp}:F>', inline=False)
        embed.add_field(name='Status', value=contest.status, inline=True)
        embed.add_field(name='Participants', value=str(contest.participant_count), inline=True)

        icon_url = f'attachment://{self.logo_filename}' if self.logo_filename else None
        embed.set_footer(text=self.footer_text, icon_url=icon_url)
        return embed

    def create_closing_embed(self) -> discord.Embed:
        return discord.Embed(
            title='Competition Ended!',
            description=(
                f'[This competition]({self.contest.competition_link}) has come to an end! '
                'I wish everyone the best who attended! '
                f'{self.contest.participant_count} participants have attended this contest.'
            ),
            color=ENDED_COLOR
        )

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def start_timer(self, message: discord.Message):
        """绑定已发送的比赛消息，并开始倒计时。"""
        self.message = message
        self._end_task = asyncio.create_task(self._end_after_duration())

    async def _end_after_duration(self):
        await asyncio.sleep(self.contest.duration_seconds)
        try:
            await self.finish()
        except Exception:
            logger.error(
                "比赛收尾时发生未知错误",
                extra={'message_id': self.message.id if self.message else None},
                exc_info=True
            )

    def cancel(self):
        """取消倒计时（Cog 卸载时调用），不做收尾编辑。"""
        if self._end_task and not self._end_task.done():
            self._end_task.cancel()
        self.stop()

    async def finish(self):
        """比赛结束：更新为 Ended、移除按钮并发布结束公告。只会执行一次。"""
        if self._finished:
            return
        self._finished = True

        self.contest.end()
        self.stop()
        self.cog.forget(self)

        message = self.message
        log_context = {
            'message_id': message.id if message else None,
            'participant_count': self.contest.participant_count
        }
        logger.info("比赛已结束", extra=log_context)

        if message is None:
            return

        try:
            await message.edit(embed=self.create_embed(), view=None)
        except discord.HTTPException:
            logger.error("结束时更新比赛消息失败", extra=log_context, exc_info=True)

        try:
            await message.channel.send(embed=self.create_closing_embed())
        except discord.HTTPException:
            logger.error("发送比赛结束公告失败", extra=log_context, exc_info=True)

    async def refresh_message(self) -> bool:
        """
        按当前人数重新渲染比赛消息。
        编辑失败只记录日志，显示的人数会停留在旧值，直到下一次成功编辑。
        """
        if self.message is None:
            return False
        try:
            await self.message.edit(embed=self.create_embed())
            return True
        except discord.HTTPException:
            logger.error(
                "更新比赛参与人数失败",
                extra={'message_id': self.message.id, 'participant_count': self.contest.participant_count},
                exc_info=True
            )
            return False

    # ----------------------------------------------------------------
    # Buttons
    # ----------------------------------------------------------------

    @ui.button(label='Attend', style=discord.ButtonStyle.secondary, custom_id=ATTEND_BUTTON_ID)
    async def attend_button(self, interaction: discord.Interaction, button: ui.Button):
        await self.handle_attend(interaction)

    @ui.button(label='Withdraw', style=discord.ButtonStyle.danger, custom_id=WITHDRAW_BUTTON_ID)
    async def withdraw_button(self, interaction: discord.Interaction, button: ui.Button):
        await self.handle_withdraw(interaction)

    async def handle_attend(self, interaction: discord.Interaction):
        user = interaction.user
        log_context = {
            'user_id': user.id,
            'guild_id': interaction.guild_id,
            'message_id': self.message.id if self.message else None,
            'nonce': interaction.id
        }

        # 弹出表单即视为这次点击已被响应
        modal = GithubLinkModal(nonce=str(interaction.id), timeout=self.contest.duration_seconds)
        await interaction.response.send_modal(modal)

        submission = await modal.wait_for_submission()
        if submission is None:
            logger.warning("等待仓库链接提交超时", extra=log_context)
            await self._send_submission_failure(interaction, log_context)
            return

        try:
            github_link = modal.github_link.value
            is_new = self.contest.add_participant(user.id)
            logger.info(
                "用户提交仓库链接参赛",
                extra={**log_context, 'new_participant': is_new, 'participant_count': self.contest.participant_count}
            )

            await self.refresh_message()
            await submission.response.send_message(SUBMISSION_THANKS_MESSAGE, ephemeral=True)
            await self.cog.notification_service.send_participant_notification(user, github_link)
        except Exception:
            logger.error("处理仓库链接提交时出错", extra=log_context, exc_info=True)
            await self._send_submission_failure(interaction, log_context)

    async def _send_submission_failure(self, interaction: discord.Interaction, log_context: dict):
        # 原始点击已用弹窗响应过，只能走 followup
        try:
            await interaction.followup.send(SUBMISSION_FAILED_MESSAGE, ephemeral=True)
        except discord.HTTPException:
            logger.warning("无法向用户发送提交失败提示", extra=log_context, exc_info=True)

    async def handle_withdraw(self, interaction: discord.Interaction):
        user = interaction.user
        log_context = {
            'user_id': user.id,
            'guild_id': interaction.guild_id,
            'message_id': self.message.id if self.message else None
        }

        if not self.contest.remove_participant(user.id):
            logger.info("未参赛用户尝试退出比赛", extra=log_context)
            await interaction.response.send_message(NOT_ATTENDING_MESSAGE, ephemeral=True)
            return

        logger.info("用户退出比赛", extra={**log_context, 'participant_count': self.contest.participant_count})
        await self.refresh_message()
        try:
            await interaction.response.send_message(WITHDRAWN_MESSAGE, ephemeral=True)
        except discord.HTTPException:
            # 用户已被移出名单，确认失败也照常发出退赛通知
            logger.warning("无法向用户发送退赛确认", extra=log_context, exc_info=True)
        await self.cog.notification_service.send_withdrawal_notification(user)

    async def on_error(self, interaction: discord.Interaction, error: Exception, item: ui.Item):
        log_context = {
            'user_id': interaction.user.id,
            'guild_id': interaction.guild_id,
            'custom_id': getattr(item, 'custom_id', None)
        }
        logger.error("比赛按钮处理失败", extra=log_context, exc_info=error)
        if not interaction.response.is_done():
            try:
                await interaction.response.send_message(GENERIC_ERROR_MESSAGE, ephemeral=True)
            except discord.HTTPException:
                logger.warning("无法向用户发送按钮错误提示", extra=log_context, exc_info=True)

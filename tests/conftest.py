"""
Shared pytest fixtures for the contest bot tests

Provides:
- Fake users, interactions, messages and channels built from unittest.mock
- A fake bot exposing the configured channel IDs
"""

import discord
import pytest
from unittest.mock import AsyncMock, MagicMock

CONTEST_CHANNEL_ID = 100
RESULT_CHANNEL_ID = 200
GUILD_ID = 300


# ============================================================================
# Builders
# ============================================================================

def make_user(user_id: int) -> MagicMock:
    user = MagicMock()
    user.id = user_id
    user.mention = f"<@{user_id}>"
    return user


def make_interaction(user_id: int = 1, interaction_id: int = 1000) -> MagicMock:
    """Fake discord.Interaction with async response/followup helpers"""
    interaction = MagicMock()
    interaction.id = interaction_id
    interaction.user = make_user(user_id)
    interaction.guild_id = GUILD_ID
    interaction.response.send_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup.send = AsyncMock()
    return interaction


def make_http_exception(status: int = 500, exc_type=discord.HTTPException):
    response = MagicMock()
    response.status = status
    response.reason = "error"
    return exc_type(response, "failed")


def embed_fields(embed: discord.Embed) -> dict:
    return {field.name: field.value for field in embed.fields}


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def contest_channel():
    channel = MagicMock()
    channel.id = CONTEST_CHANNEL_ID
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def contest_message(contest_channel):
    message = MagicMock()
    message.id = 555
    message.channel = contest_channel
    message.edit = AsyncMock()
    contest_channel.send.return_value = message
    return message


@pytest.fixture
def result_channel():
    channel = MagicMock()
    channel.id = RESULT_CHANNEL_ID
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def fake_bot(contest_channel, result_channel):
    """Bot whose channel cache knows the contest and result channels"""
    channels = {
        CONTEST_CHANNEL_ID: contest_channel,
        RESULT_CHANNEL_ID: result_channel,
    }
    bot = MagicMock()
    bot.contest_channel_id = CONTEST_CHANNEL_ID
    bot.result_channel_id = RESULT_CHANNEL_ID
    bot.get_channel = MagicMock(side_effect=channels.get)
    bot.fetch_channel = AsyncMock(side_effect=make_http_exception(404, discord.NotFound))
    return bot

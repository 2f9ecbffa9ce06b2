"""
Unit tests for shared helpers in src.core.utils
"""

import discord
import pytest
from unittest.mock import AsyncMock, MagicMock

from conftest import make_http_exception
from src.core.utils import load_id_from_env, resolve_channel, get_text_input_value


@pytest.mark.unit
@pytest.mark.core
class TestLoadIdFromEnv:
    """Test reading Discord IDs from the environment"""

    def test_valid_id(self, monkeypatch):
        monkeypatch.setenv("CONTEST_CHANNEL_ID", " 123456789012345678 ")
        assert load_id_from_env("CONTEST_CHANNEL_ID") == 123456789012345678

    def test_unset_id(self, monkeypatch):
        monkeypatch.delenv("CONTEST_CHANNEL_ID", raising=False)
        assert load_id_from_env("CONTEST_CHANNEL_ID") is None

    def test_invalid_id(self, monkeypatch):
        monkeypatch.setenv("CONTEST_CHANNEL_ID", "general")
        assert load_id_from_env("CONTEST_CHANNEL_ID") is None


@pytest.mark.unit
@pytest.mark.core
class TestResolveChannel:
    """Test cache-then-fetch channel lookup"""

    @pytest.mark.asyncio
    async def test_cached_channel(self):
        channel = MagicMock()
        client = MagicMock()
        client.get_channel.return_value = channel
        client.fetch_channel = AsyncMock()

        assert await resolve_channel(client, 1, "test") is channel
        client.fetch_channel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetched_channel(self):
        channel = MagicMock()
        client = MagicMock()
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(return_value=channel)

        assert await resolve_channel(client, 1, "test") is channel

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc_type, status",
        [(discord.NotFound, 404), (discord.Forbidden, 403), (discord.HTTPException, 503)]
    )
    async def test_inaccessible_channel(self, exc_type, status):
        client = MagicMock()
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(side_effect=make_http_exception(status, exc_type))

        assert await resolve_channel(client, 1, "test") is None

    @pytest.mark.asyncio
    async def test_unconfigured_channel(self):
        client = MagicMock()
        assert await resolve_channel(client, None, "test") is None
        client.get_channel.assert_not_called()


@pytest.mark.unit
@pytest.mark.core
class TestGetTextInputValue:
    """Test reading a field from raw modal data"""

    def test_action_row_layout(self):
        interaction = MagicMock()
        interaction.data = {
            "components": [
                {"type": 1, "components": [{"type": 4, "custom_id": "other", "value": "a"}]},
                {"type": 1, "components": [{"type": 4, "custom_id": "githubLink", "value": "b"}]},
            ]
        }
        assert get_text_input_value(interaction, "githubLink") == "b"

    def test_label_layout(self):
        interaction = MagicMock()
        interaction.data = {
            "components": [{"type": 18, "component": {"type": 4, "custom_id": "githubLink", "value": "c"}}]
        }
        assert get_text_input_value(interaction, "githubLink") == "c"

    def test_missing_field(self):
        interaction = MagicMock()
        interaction.data = None
        assert get_text_input_value(interaction, "githubLink") is None

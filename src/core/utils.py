# src/core/utils.py
import os
import logging
import discord
from typing import Optional

logger = logging.getLogger(__name__)


def load_id_from_env(name: str) -> Optional[int]:
    """
    从环境变量读取一个 Discord ID (guild / channel)。
    未配置或格式错误时返回 None，并记录日志。
    """
    raw = os.getenv(name, '').strip()
    if not raw:
        logger.warning(f"未在 .env 文件中配置 {name}。")
        return None

    try:
        return int(raw)
    except ValueError:
        logger.error(f"错误：解析 {name} 时出错！请检查 .env 文件中的值 '{raw}' 是否为纯数字。")
        return None


async def resolve_channel(
    client: discord.Client,
    channel_id: Optional[int],
    purpose: str
) -> Optional[discord.abc.Messageable]:
    """
    先查缓存，再向 API 获取频道。
    找不到、无权限或请求失败时返回 None，由调用方决定如何降级。

    :param client: 机器人客户端
    :param channel_id: 频道 ID，未配置时为 None
    :param purpose: 频道用途，用于日志记录 (例如: "比赛频道")
    """
    if channel_id is None:
        logger.warning(f"{purpose}未配置，跳过。")
        return None

    channel = client.get_channel(channel_id)
    if channel is not None:
        return channel

    try:
        return await client.fetch_channel(channel_id)
    except discord.HTTPException as e:
        # 包括 NotFound、Forbidden 以及服务端错误
        logger.warning(f"无法访问{purpose}。", extra={'channel_id': channel_id, 'error': str(e)})
        return None


def get_text_input_value(interaction: discord.Interaction, custom_id: str) -> Optional[str]:
    """从弹窗提交的原始数据中取出指定输入框的值。"""
    data = interaction.data or {}
    for row in data.get('components', []):
        # 行组件 (action row) 带 components 列表，标签组件 (label) 只包一个 component
        children = row.get('components') or ([row['component']] if 'component' in row else [])
        for component in children:
            if component.get('custom_id') == custom_id:
                return component.get('value')
    return None

# src/modules/contest/models.py

import math
import time
from dataclasses import dataclass, field
from typing import Optional

STATUS_ONGOING = 'Ongoing'
STATUS_ENDED = 'Ended'

@dataclass
class Contest:
    """
    一次 /contest 调用对应的比赛，只存在于内存中。
    进程重启后所有比赛状态都会丢失。
    参与者只记录用户ID，提交的链接只作为通知发出，不在这里保存。
    """
    competition_link: str
    duration_ms: float
    end_timestamp: int
    participants: set[int] = field(default_factory=set)
    status: str = STATUS_ONGOING

    @classmethod
    def start(cls, competition_link: str, duration_ms: float, now: Optional[float] = None) -> "Contest":
        """以当前时间为起点创建比赛，结束时间取整到秒。"""
        now = time.time() if now is None else now
        end_timestamp = math.floor(now) + math.floor(duration_ms / 1000)
        return cls(competition_link=competition_link, duration_ms=duration_ms, end_timestamp=end_timestamp)

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_ended(self) -> bool:
        return self.status == STATUS_ENDED

    def add_participant(self, user_id: int) -> bool:
        """
        Returns:
            bool: 新加入返回 True；已在名单中返回 False（名单不变）。
        """
        if user_id in self.participants:
            return False
        self.participants.add(user_id)
        return True

    def remove_participant(self, user_id: int) -> bool:
        """
        Returns:
            bool: 成功退出返回 True；本不在名单中返回 False。
        """
        if user_id not in self.participants:
            return False
        self.participants.discard(user_id)
        return True

    def end(self):
        self.status = STATUS_ENDED

"""DedupWindow -- 已见时间戳的有界集合

容量达到上限时整体清空后再插入（不是 LRU / 滑动窗口）。
因此清空前刚见过的时间戳可能被再次投递，这是已知行为。
"""

from sigrelay.core.config import DEDUP_WINDOW_CAPACITY


class DedupWindow:
    """去重窗口 -- 每个 Relay 实例独占，跨重连保留"""

    def __init__(self, capacity: int = DEDUP_WINDOW_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity 必须 >= 1")
        self._capacity = capacity
        self._seen: set[int] = set()
        self.clear_count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, timestamp: int) -> bool:
        return timestamp in self._seen

    def check_and_add(self, timestamp: int) -> bool:
        """检查并记录时间戳

        Args:
            timestamp: 帧时间戳

        Returns:
            True 表示首次出现（已记录），False 表示重复
        """
        if timestamp in self._seen:
            return False
        if len(self._seen) >= self._capacity:
            self._seen.clear()
            self.clear_count += 1
        self._seen.add(timestamp)
        return True

# sync.py
"""词表同步: 鉴权 -> 读取 -> 合并 -> 保存 -> 通知缓存失效"""
import hmac
import logging
import threading
from dataclasses import dataclass, replace

from errors import InvalidSnapshot, Unauthorized
from models import WordList

logger = logging.getLogger(__name__)

WORD_LIST_VIEW = 'word_list'


@dataclass
class SyncResult:
    success: bool
    message: str
    count: int = 0
    backend: str = ''


def check_secret(provided, expected):
    # 服务端没配置密钥时一律拒绝
    if not expected or provided is None:
        return False
    return hmac.compare_digest(provided.encode('utf-8'), expected.encode('utf-8'))


def merge_words(existing, incoming):
    """用客户端快照覆盖已有词表，只保留旧记录的 createdAt

    结果的长度和顺序与 incoming 完全一致，incoming 里没有的旧单词会被丢掉。
    """
    lookup = {w.key: w for w in existing}

    merged = []
    for word in incoming:
        old = lookup.get(word.key)
        if old is not None and old.createdAt is not None:
            merged.append(replace(word, createdAt=old.createdAt, extra=dict(word.extra)))
        else:
            merged.append(word)
    return merged


def find_duplicate_keys(words):
    seen = set()
    duplicates = []
    for w in words:
        if w.key in seen:
            duplicates.append(w.key)
        seen.add(w.key)
    return duplicates


class SyncService:

    def __init__(self, backend, view_cache, secret):
        self.backend = backend
        self.view_cache = view_cache
        self.secret = secret
        # 同一进程内的并发同步串行执行，避免后写覆盖先写
        self._lock = threading.Lock()

    def sync(self, secret, incoming):
        if not check_secret(secret, self.secret):
            raise Unauthorized('Unauthorized')

        duplicates = find_duplicate_keys(incoming.words)
        if duplicates:
            raise InvalidSnapshot(f'快照中有重复的单词: {duplicates[:5]}')

        with self._lock:
            existing = self.backend.load()
            existing_words = existing.words if existing is not None else []

            merged = WordList(words=merge_words(existing_words, incoming.words))
            self.backend.save(merged)

        logger.info('同步完成: %d 个单词 (已有 %d 个) -> %s',
                    len(merged), len(existing_words), self.backend.label)

        self._notify_cache()
        return SyncResult(
            success=True,
            message=f'Data synced successfully ({self.backend.label})',
            count=len(merged),
            backend=self.backend.label
        )

    def _notify_cache(self):
        # 缓存失效只是通知，失败了也不影响同步结果
        try:
            self.view_cache.invalidate()
        except Exception:
            logger.exception('通知页面缓存失效失败')

    def read_word_list(self):
        """给页面层用的唯一读取入口，没有数据时返回 None"""
        return self.view_cache.get_or_compute(WORD_LIST_VIEW, self.backend.load)

# cache.py
import logging
import threading

logger = logging.getLogger(__name__)


class ViewCache:
    """页面数据的进程内缓存（词表、统计、汉字分组）

    同步成功后调用 invalidate()，下一次读取时重新计算。
    每次 invalidate() 都会让 generation 加一；计算期间如果发生了失效，
    算出来的旧结果只返回给本次调用，不写进缓存。
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._views = {}
        self._generation = 0

    @property
    def generation(self):
        with self._lock:
            return self._generation

    def get_or_compute(self, name, compute):
        with self._lock:
            if name in self._views:
                return self._views[name]
            generation = self._generation
        value = compute()
        with self._lock:
            if generation == self._generation:
                self._views[name] = value
            else:
                logger.info('计算 %s 期间缓存已失效，结果不缓存', name)
        return value

    def invalidate(self):
        with self._lock:
            names = list(self._views)
            self._views.clear()
            self._generation += 1
        logger.info('页面缓存已失效: %s', names)

    def __contains__(self, name):
        with self._lock:
            return name in self._views

    def __len__(self):
        with self._lock:
            return len(self._views)

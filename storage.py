# storage.py
"""词表的持久化后端

三种实现对外都是同一个接口:
    load() -> WordList 或 None（还没有同步过）
    save(word_list)
每个实例还有一个 label，同步成功后返回给客户端，告诉它数据写到了哪里。
"""
import logging
import os
import tempfile
from urllib.parse import quote

import redis
import requests

from errors import BackendUnavailable, NotConfigured
from models import dumps_word_list, loads_word_list

logger = logging.getLogger(__name__)

WORDLIST_FILENAME = 'wordlist.json'


class RedisBackend:
    """通过连接串访问的 Redis，每次调用单独建立并释放连接"""
    label = 'Redis'

    def __init__(self, url, key='wordlist', timeout=5.0):
        self.url = url
        self.key = key
        self.timeout = timeout

    def _connect(self):
        # from_url 会解析主机、端口、密码以及 rediss:// 的 TLS 标志；连接串格式错误时抛 ValueError
        try:
            return redis.Redis.from_url(
                self.url,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
            )
        except (redis.RedisError, ValueError) as e:
            logger.error('Redis 连接串无效: %s', e)
            raise BackendUnavailable(f'Redis 连接串无效: {e}') from e

    def load(self):
        client = self._connect()
        try:
            raw = client.get(self.key)
        except redis.RedisError as e:
            logger.error('Redis 读取失败: %s', e)
            raise BackendUnavailable(f'Redis 读取失败: {e}') from e
        finally:
            client.close()

        if raw is None:
            return None
        return loads_word_list(raw)

    def save(self, word_list):
        data = dumps_word_list(word_list)
        client = self._connect()
        try:
            client.set(self.key, data)
        except redis.RedisError as e:
            logger.error('Redis 写入失败: %s', e)
            raise BackendUnavailable(f'Redis 写入失败: {e}') from e
        finally:
            client.close()


class RestKVBackend:
    """托管 KV 的 REST 接口（Upstash 格式: /get/<key>、/set/<key>）"""
    label = 'KV'

    def __init__(self, url, token, key='wordlist', timeout=5.0):
        self.url = url.rstrip('/')
        self.token = token
        self.key = key
        self.timeout = timeout

    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"}

    def _call(self, method, command, data=None):
        url = f"{self.url}/{command}/{quote(self.key, safe='')}"
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                data=data,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error('KV 请求失败: %s', e)
            raise BackendUnavailable(f'KV 请求失败: {e}') from e

        if response.status_code != 200:
            logger.error('KV 返回错误: %s %s', response.status_code, response.text)
            raise BackendUnavailable(f'KV 返回 HTTP {response.status_code}')

        try:
            body = response.json()
        except ValueError as e:
            raise BackendUnavailable('KV 返回的不是 JSON') from e
        if isinstance(body, dict) and body.get('error'):
            logger.error('KV 返回错误: %s', body['error'])
            raise BackendUnavailable(f"KV 返回错误: {body['error']}")
        return body

    def load(self):
        body = self._call('GET', 'get')
        result = body.get('result') if isinstance(body, dict) else None
        if result is None:
            return None
        return loads_word_list(result)

    def save(self, word_list):
        data = dumps_word_list(word_list)
        self._call('POST', 'set', data=data.encode('utf-8'))


class FileBackend:
    """本地文件: <directory>/wordlist.json"""
    label = 'FS'

    def __init__(self, directory, filename=WORDLIST_FILENAME):
        self.directory = directory
        self.filename = filename

    @property
    def path(self):
        return os.path.join(self.directory, self.filename)

    def load(self):
        try:
            with open(self.path, 'rb') as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error('读取词表文件失败 %s: %s', self.path, e)
            raise BackendUnavailable(f'读取词表文件失败: {e}') from e
        return loads_word_list(raw)

    def save(self, word_list):
        data = dumps_word_list(word_list)

        try:
            os.makedirs(self.directory, exist_ok=True)
        except OSError as e:
            logger.error('无法创建数据目录 %s: %s', self.directory, e)
            raise NotConfigured(f'无法创建数据目录: {e}') from e

        # 先写临时文件再 rename，读的一方不会看到写了一半的文件
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix='.wordlist-', suffix='.tmp')
        except PermissionError as e:
            logger.error('数据目录不可写 %s: %s', self.directory, e)
            raise NotConfigured(f'数据目录不可写: {e}') from e
        except OSError as e:
            raise BackendUnavailable(f'写入词表文件失败: {e}') from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(data)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error('写入词表文件失败 %s: %s', self.path, e)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise BackendUnavailable(f'写入词表文件失败: {e}') from e


def resolve_backend_name(config):
    """返回要使用的后端名称: redis / kv / fs"""
    explicit = (config.STORAGE_BACKEND or '').strip().lower()
    if explicit:
        if explicit not in ('redis', 'kv', 'fs'):
            raise NotConfigured(f'未知的存储后端: {explicit}')
        return explicit

    if config.REDIS_URL:
        return 'redis'
    if config.KV_REST_API_URL and config.KV_REST_API_TOKEN:
        return 'kv'
    return 'fs'


def create_backend(config):
    name = resolve_backend_name(config)
    timeout = config.STORAGE_TIMEOUT

    if name == 'redis':
        if not config.REDIS_URL:
            raise NotConfigured('STORAGE_BACKEND=redis 但没有配置 REDIS_URL')
        return RedisBackend(config.REDIS_URL, key=config.WORDLIST_KEY, timeout=timeout)

    if name == 'kv':
        if not (config.KV_REST_API_URL and config.KV_REST_API_TOKEN):
            raise NotConfigured('STORAGE_BACKEND=kv 但 KV_REST_API_URL / KV_REST_API_TOKEN 不完整')
        return RestKVBackend(
            config.KV_REST_API_URL,
            config.KV_REST_API_TOKEN,
            key=config.WORDLIST_KEY,
            timeout=timeout
        )

    return FileBackend(config.DATA_DIR)

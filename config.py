# config.py
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    # 存储后端三选一，优先级: Redis > KV (REST) > 本地文件
    # 格式: redis://:密码@主机:6379/0，TLS 用 rediss://
    REDIS_URL = os.getenv('REDIS_URL', '')

    # 托管 KV（Upstash / Vercel KV 的 REST 接口），URL 和 Token 必须同时配置
    KV_REST_API_URL = os.getenv('KV_REST_API_URL', '')
    KV_REST_API_TOKEN = os.getenv('KV_REST_API_TOKEN', '')

    # 显式指定后端: redis / kv / fs，留空则按上面的优先级自动选择
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', '')

    # 本地文件后端: DATA_DIR/wordlist.json
    DATA_DIR = os.getenv('DATA_DIR', os.path.join(BASE_DIR, 'data'))
    WORDLIST_KEY = os.getenv('WORDLIST_KEY', 'wordlist')
    STORAGE_TIMEOUT = float(os.getenv('STORAGE_TIMEOUT', '5'))

    # 同步密钥，未配置时所有同步请求都会被拒绝
    SYNC_SECRET = os.getenv('SYNC_SECRET', '')

    # 汉字元数据 (jlpt_kanji.json / wanikani_kanji.json) 所在目录
    KANJI_DATA_DIR = os.getenv('KANJI_DATA_DIR', DATA_DIR)

    DICTIONARY_API_URL = os.getenv('DICTIONARY_API_URL', 'https://jisho.org/api/v1/search/words')

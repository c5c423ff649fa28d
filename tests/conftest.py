"""
tests/conftest.py
"""
import pytest
import os
import sys
import tempfile

# ========== 关键：在导入app之前设置环境变量 ==========
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

TEST_SECRET = 'test-secret'

os.environ['SYNC_SECRET'] = TEST_SECRET
os.environ['DATA_DIR'] = tempfile.mkdtemp(prefix='vocab-test-')
for name in ('REDIS_URL', 'KV_REST_API_URL', 'KV_REST_API_TOKEN', 'STORAGE_BACKEND'):
    os.environ.pop(name, None)

# ========== 导入app ==========
from app import app, sync_service, view_cache
from models import Word, WordList
from storage import FileBackend


@pytest.fixture
def file_backend(tmp_path):
    """每个测试一个独立的数据目录"""
    return FileBackend(str(tmp_path / 'data'))


@pytest.fixture
def test_client(file_backend):
    """
    测试客户端fixture - 每个测试函数一个干净的存储和缓存
    """
    original_backend = sync_service.backend
    original_secret = sync_service.secret

    sync_service.backend = file_backend
    sync_service.secret = TEST_SECRET
    view_cache.invalidate()

    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client

    sync_service.backend = original_backend
    sync_service.secret = original_secret
    view_cache.invalidate()


@pytest.fixture
def auth_headers():
    return {'x-sync-secret': TEST_SECRET}


@pytest.fixture
def sample_words():
    """
    预置测试单词数据（mod 为毫秒时间戳）
    """
    return [
        {'dictForm': '食べる', 'secondary': 'たべる', 'partOfSpeech': 'verb', 'language': 'ja',
         'knownStatus': 'KNOWN', 'hasCard': 1, 'tracked': 1, 'mod': 1704067200000, 'createdAt': 100},
        {'dictForm': '飲む', 'secondary': 'のむ', 'partOfSpeech': 'verb', 'language': 'ja',
         'knownStatus': 'LEARNING', 'hasCard': 0, 'tracked': 1, 'mod': 1706745600000},
        {'dictForm': '日本', 'secondary': 'にほん', 'partOfSpeech': 'noun', 'language': 'ja',
         'knownStatus': 'KNOWN', 'hasCard': 1, 'tracked': 0, 'mod': 1706832000000},
        {'dictForm': 'する', 'secondary': '', 'partOfSpeech': 'verb', 'language': 'ja',
         'knownStatus': 'IGNORED', 'hasCard': 0, 'tracked': 0, 'mod': 0},
    ]


@pytest.fixture
def stored(file_backend):
    """把单词直接写进存储，模拟之前已经同步过"""
    def _store(words):
        file_backend.save(WordList(words=[Word.from_dict(w) for w in words]))
        return file_backend
    return _store


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 标记为单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 标记为端到端流程测试")

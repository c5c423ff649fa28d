# errors.py
"""同步流程中用到的异常类型"""


class SyncError(Exception):
    """所有同步/存储异常的基类"""


class Unauthorized(SyncError):
    """同步密钥缺失或不匹配"""


class BackendUnavailable(SyncError):
    """存储后端无法连接或返回异常"""


class SerializationError(SyncError):
    """存储内容不是合法的 JSON 词表，或者写入时编码失败"""


class InvalidSnapshot(SerializationError):
    """请求体不是合法的词表快照（格式错误或者有重复的单词）"""


class NotConfigured(SyncError):
    """没有可用的存储后端（包括本地目录不可写）"""

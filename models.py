# models.py
import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from errors import SerializationError

# 学习状态: 已掌握 / 学习中 / 未学 / 忽略
KNOWN_STATUSES = ('KNOWN', 'LEARNING', 'UNKNOWN', 'IGNORED')


@dataclass
class Word:
    """词表中的一个单词

    所有字段都是可选的，None 表示 JSON 里没有这个字段。
    未知字段放在 extra 里，保证原样写回。
    """
    dictForm: Optional[str] = None
    secondary: Optional[str] = None
    partOfSpeech: Optional[str] = None
    language: Optional[str] = None
    knownStatus: Optional[str] = None
    hasCard: Optional[int] = None
    tracked: Optional[int] = None
    mod: Optional[int] = None
    createdAt: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Tuple[Optional[str], Optional[str]]:
        # 同一个 (词形, 语言) 就是同一个单词
        return (self.dictForm, self.language)

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise SerializationError(f'单词必须是 JSON 对象，收到 {type(data).__name__}')
        if not isinstance(data.get('dictForm'), str):
            raise SerializationError('单词缺少 dictForm 字段')

        known = {f.name for f in fields(cls) if f.name != 'extra'}
        kwargs = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **kwargs)

    def to_dict(self):
        data = {}
        for f in fields(self):
            if f.name == 'extra':
                continue
            value = getattr(self, f.name)
            if value is not None:
                data[f.name] = value
        data.update(self.extra)
        return data


@dataclass
class WordList:
    words: List[Word] = field(default_factory=list)

    def __len__(self):
        return len(self.words)

    def __iter__(self):
        return iter(self.words)

    @classmethod
    def from_dict(cls, payload):
        """只接受 {"words": [...]} 信封格式（同步接口用）"""
        if not isinstance(payload, dict) or not isinstance(payload.get('words'), list):
            raise SerializationError('词表必须是 {"words": [...]} 格式')
        return cls(words=[Word.from_dict(item) for item in payload['words']])

    @classmethod
    def from_stored(cls, payload):
        """读取存储内容，兼容旧版的裸数组格式"""
        return cls.from_dict(normalize_payload(payload))

    def to_dict(self):
        return {'words': [w.to_dict() for w in self.words]}


def normalize_payload(payload):
    # 旧版本直接存的是单词数组
    if isinstance(payload, list):
        return {'words': payload}
    if isinstance(payload, dict) and isinstance(payload.get('words'), list):
        return payload
    raise SerializationError('存储内容既不是词表信封也不是单词数组')


def dumps_word_list(word_list: WordList) -> str:
    try:
        return json.dumps(word_list.to_dict(), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f'词表编码失败: {e}') from e


def loads_word_list(raw) -> WordList:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SerializationError(f'存储内容不是 UTF-8: {e}') from e
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise SerializationError(f'存储内容不是合法 JSON: {e}') from e
    return WordList.from_stored(payload)

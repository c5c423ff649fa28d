# kanji.py
import json
import logging
import os
import re
from types import MappingProxyType

from models import KNOWN_STATUSES

logger = logging.getLogger(__name__)

KANJI_PATTERN = re.compile(r'[\u4e00-\u9faf]')

JLPT_FILENAME = 'jlpt_kanji.json'
WANIKANI_FILENAME = 'wanikani_kanji.json'


def is_kanji(char):
    return bool(KANJI_PATTERN.fullmatch(char))


def _load_table(path, char_field):
    """读取 [{...}, ...] 格式的汉字表，按字符建索引；文件缺失时返回空表"""
    if not os.path.exists(path):
        logger.warning('汉字数据文件不存在: %s', path)
        return {}
    try:
        with open(path, encoding='utf-8') as f:
            rows = json.load(f)
    except (OSError, ValueError) as e:
        logger.error('读取汉字数据失败 %s: %s', path, e)
        return {}
    return {row[char_field]: row for row in rows if isinstance(row, dict) and row.get(char_field)}


class KanjiIndex:
    """JLPT 和 WaniKani 两份汉字元数据的只读索引，启动时构建一次"""

    def __init__(self, jlpt=None, wanikani=None):
        self.jlpt = MappingProxyType(dict(jlpt or {}))
        self.wanikani = MappingProxyType(dict(wanikani or {}))

    @classmethod
    def from_directory(cls, directory):
        return cls(
            jlpt=_load_table(os.path.join(directory, JLPT_FILENAME), 'kanji'),
            wanikani=_load_table(os.path.join(directory, WANIKANI_FILENAME), 'character'),
        )

    def describe(self, char):
        return {'jlpt': self.jlpt.get(char), 'wanikani': self.wanikani.get(char)}


def group_kanji_by_status(words, index):
    # status -> {汉字: [包含它的单词]}，dict 保持首次出现的顺序
    grouped = {status: {} for status in KNOWN_STATUSES}
    for word in words:
        by_kanji = grouped.get(word.knownStatus)
        if by_kanji is None or not word.dictForm:
            continue
        for char in word.dictForm:
            if not is_kanji(char):
                continue
            forms = by_kanji.setdefault(char, [])
            if word.dictForm not in forms:
                forms.append(word.dictForm)

    result = {}
    for status, by_kanji in grouped.items():
        entries = [
            dict(kanji=char, words=forms, **index.describe(char))
            for char, forms in by_kanji.items()
        ]
        entries.sort(key=lambda e: len(e['words']), reverse=True)
        result[status] = entries
    return result

# practice.py
"""打字练习: 按掌握状态抽牌、判分、计算成绩"""
import math
import random

from kanji import is_kanji

PRACTICE_CATEGORIES = ('KNOWN', 'LEARNING', 'UNKNOWN')
ROUND_DURATIONS = (60, 120, 300)


def _round_half_up(value):
    # 与前端 Math.round 一致，0.5 向上取整
    return int(math.floor(value + 0.5))


def build_deck(words, category, index, rng=None):
    """筛出指定状态的单词并打乱，每张卡片附带词中汉字的 WaniKani 信息"""
    if category not in PRACTICE_CATEGORIES:
        raise ValueError(f'未知的练习类别: {category}')

    deck = [w for w in words if w.knownStatus == category]
    (rng or random.Random()).shuffle(deck)

    cards = []
    for word in deck:
        card = word.to_dict()
        card['kanji'] = [
            {'kanji': char, 'wanikani': index.wanikani.get(char)}
            for char in (word.dictForm or '') if is_kanji(char)
        ]
        cards.append(card)
    return cards


def check_answer(word, answer):
    """输入与读音或原形一致（忽略首尾空白）即算正确"""
    if not isinstance(answer, str):
        return False
    answer = answer.strip()
    if not answer:
        return False
    candidates = (word.get('secondary'), word.get('dictForm'))
    return any(isinstance(c, str) and answer == c.strip() for c in candidates)


def score_round(score, mistakes, duration):
    if duration <= 0:
        raise ValueError('duration 必须大于 0')
    wpm = _round_half_up(score / duration * 60)
    attempts = score + mistakes
    accuracy = _round_half_up(score / attempts * 100) if attempts else 0
    return {'score': score, 'mistakes': mistakes, 'duration': duration,
            'wpm': wpm, 'accuracy': accuracy}

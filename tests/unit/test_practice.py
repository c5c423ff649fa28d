import random

import pytest
import allure

from kanji import KanjiIndex
from models import Word
from practice import PRACTICE_CATEGORIES, build_deck, check_answer, score_round

pytestmark = pytest.mark.unit


def word(form, status, secondary=None):
    return Word.from_dict({'dictForm': form, 'language': 'ja', 'knownStatus': status, 'secondary': secondary})


@allure.epic("打字练习单元测试")
@allure.feature("抽牌")
class TestBuildDeck:

    @pytest.fixture
    def words(self):
        return [
            word('食べる', 'KNOWN', 'たべる'),
            word('飲む', 'LEARNING', 'のむ'),
            word('日本', 'KNOWN', 'にほん'),
            word('する', 'IGNORED'),
            word('猫', 'UNKNOWN', 'ねこ'),
        ]

    @pytest.mark.parametrize("category, expected", [
        ('KNOWN', {'食べる', '日本'}),
        ('LEARNING', {'飲む'}),
        ('UNKNOWN', {'猫'}),
    ])
    def test_filters_by_status(self, words, category, expected):
        deck = build_deck(words, category, KanjiIndex())

        assert {card['dictForm'] for card in deck} == expected
        assert all(card['knownStatus'] == category for card in deck)

    @pytest.mark.parametrize("category", ['IGNORED', 'known', None])
    def test_unknown_category(self, words, category):
        with pytest.raises(ValueError):
            build_deck(words, category, KanjiIndex())

    @allure.title("同一个随机种子抽出的顺序相同")
    def test_shuffle_uses_given_rng(self):
        words = [word(f'語{i}', 'KNOWN') for i in range(20)]

        first = build_deck(words, 'KNOWN', KanjiIndex(), rng=random.Random(7))
        second = build_deck(words, 'KNOWN', KanjiIndex(), rng=random.Random(7))

        assert [c['dictForm'] for c in first] == [c['dictForm'] for c in second]
        assert sorted(c['dictForm'] for c in first) == sorted(w.dictForm for w in words)

    @allure.title("卡片附带词中汉字的 WaniKani 信息")
    def test_attaches_wanikani_info(self, words):
        index = KanjiIndex(wanikani={'日': {'character': '日', 'level': 2}})

        deck = build_deck(words, 'KNOWN', index)

        cards = {card['dictForm']: card for card in deck}
        assert cards['日本']['kanji'] == [
            {'kanji': '日', 'wanikani': {'character': '日', 'level': 2}},
            {'kanji': '本', 'wanikani': None},
        ]
        assert cards['食べる']['kanji'] == [{'kanji': '食', 'wanikani': None}]

    def test_categories(self):
        assert PRACTICE_CATEGORIES == ('KNOWN', 'LEARNING', 'UNKNOWN')


@allure.epic("打字练习单元测试")
@allure.feature("判分")
class TestCheckAnswer:

    CARD = {'dictForm': '食べる', 'secondary': ' たべる'}

    @pytest.mark.parametrize("answer, expected", [
        ('たべる', True),
        ('  たべる ', True),
        ('食べる', True),
        ('たべ', False),
        ('', False),
        ('   ', False),
        (None, False),
    ])
    def test_matches_reading_or_form(self, answer, expected):
        assert check_answer(self.CARD, answer) is expected

    def test_word_without_reading(self):
        assert check_answer({'dictForm': 'する'}, 'する') is True
        assert check_answer({'dictForm': 'する'}, 'suru') is False


@allure.epic("打字练习单元测试")
@allure.feature("成绩")
class TestScoreRound:

    def test_wpm_and_accuracy(self):
        assert score_round(30, 10, 120) == {
            'score': 30, 'mistakes': 10, 'duration': 120, 'wpm': 15, 'accuracy': 75,
        }

    @allure.title("0.5 向上取整")
    def test_half_rounds_up(self):
        # 1/8*60 = 7.5，1/8*100 = 12.5
        result = score_round(1, 7, 8)

        assert result['wpm'] == 8
        assert result['accuracy'] == 13

    @allure.title("没有作答时准确率为 0")
    def test_no_attempts(self):
        assert score_round(0, 0, 60)['accuracy'] == 0
        assert score_round(0, 0, 60)['wpm'] == 0

    @pytest.mark.parametrize("duration", [0, -60])
    def test_bad_duration(self, duration):
        with pytest.raises(ValueError):
            score_round(1, 0, duration)

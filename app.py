# app.py
from flask import Flask, request, jsonify
from config import Config
from cache import ViewCache
from errors import Unauthorized
from kanji import KanjiIndex, group_kanji_by_status
from models import WordList
from practice import PRACTICE_CATEGORIES, ROUND_DURATIONS, build_deck, check_answer, score_round
from services import lookup_term
from stats import activity_heatmap, build_summary, parse_day
from storage import create_backend
from sync import SyncService, check_secret
import logging

NO_DATA_MESSAGE = 'No data synced yet.'
SYNC_FAILED_MESSAGE = 'Failed to sync data'

app = Flask(__name__)
app.config.from_object(Config)

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

# 存储后端、页面缓存、汉字索引只在启动时创建一次
view_cache = ViewCache()
sync_service = SyncService(create_backend(Config), view_cache, Config.SYNC_SECRET)
kanji_index = KanjiIndex.from_directory(Config.KANJI_DATA_DIR)

app.logger.info('词表存储后端: %s', sync_service.backend.label)


def no_data_response(**extra):
    return jsonify({'synced': False, 'message': NO_DATA_MESSAGE, **extra})


def word_list_view(name, build):
    """读取词表并构建派生数据，二者在同一次缓存计算里完成；没有数据时返回 None"""
    def compute():
        word_list = sync_service.read_word_list()
        return None if word_list is None else build(word_list)
    return view_cache.get_or_compute(name, compute)


# --- API 接口 ---

@app.route('/api/sync', methods=['POST'])
def sync_words():
    secret = request.headers.get('x-sync-secret')

    try:
        # 1. 先鉴权，密钥不对不做任何读写
        if not check_secret(secret, sync_service.secret):
            raise Unauthorized('Unauthorized')

        # 2. 解析快照（必须是 {"words": [...]}）
        payload = request.get_json(force=True, silent=True)
        result = sync_service.sync(secret, WordList.from_dict(payload))

        return jsonify({'success': True, 'message': result.message}), 200
    except Unauthorized:
        app.logger.warning('同步请求鉴权失败: %s', request.remote_addr)
        return jsonify({'success': False, 'message': 'Unauthorized'}), 401
    except Exception:
        # 具体原因只写日志，不返回给客户端
        app.logger.exception('同步词表失败')
        return jsonify({'success': False, 'message': SYNC_FAILED_MESSAGE}), 500


@app.route('/api/words', methods=['GET'])
def get_words():
    try:
        word_list = sync_service.read_word_list()
    except Exception:
        app.logger.exception('读取词表失败')
        return jsonify({'error': 'Failed to load word list'}), 500

    if word_list is None:
        return no_data_response(words=[])
    return jsonify({'synced': True, **word_list.to_dict()})


@app.route('/api/stats', methods=['GET'])
def get_stats():
    try:
        today = parse_day(request.args.get('today'))
    except ValueError:
        return jsonify({'error': 'today 必须是 YYYY-MM-DD 格式'}), 400

    try:
        word_list = sync_service.read_word_list()
        if word_list is None:
            return no_data_response()

        # 只缓存与日期无关的部分，热力图每次按 today 现算
        summary = word_list_view('stats', build_summary)
        if summary is None:
            return no_data_response()
        heatmap = activity_heatmap(word_list.words, today=today)
    except Exception:
        app.logger.exception('计算统计数据失败')
        return jsonify({'error': 'Failed to load statistics'}), 500

    return jsonify({'synced': True, **summary, 'heatmap': heatmap})


@app.route('/api/kanji', methods=['GET'])
def get_kanji():
    try:
        groups = word_list_view(
            'kanji', lambda word_list: group_kanji_by_status(word_list.words, kanji_index)
        )
    except Exception:
        app.logger.exception('汉字分组失败')
        return jsonify({'error': 'Failed to load kanji'}), 500

    if groups is None:
        return no_data_response()
    return jsonify({'synced': True, 'kanji': groups})


@app.route('/api/practice', methods=['GET'])
def get_practice_deck():
    category = request.args.get('category', 'KNOWN')
    if category not in PRACTICE_CATEGORIES:
        return jsonify({'error': f'category 必须是 {", ".join(PRACTICE_CATEGORIES)} 之一'}), 400

    try:
        word_list = sync_service.read_word_list()
    except Exception:
        app.logger.exception('读取练习词表失败')
        return jsonify({'error': 'Failed to load practice deck'}), 500

    if word_list is None:
        return no_data_response(deck=[])
    deck = build_deck(word_list.words, category, kanji_index)
    return jsonify({'synced': True, 'category': category, 'deck': deck})


@app.route('/api/practice/check', methods=['POST'])
def check_practice_answer():
    data = request.get_json(silent=True)
    word = data.get('word') if isinstance(data, dict) else None
    if not isinstance(word, dict):
        return jsonify({'error': 'word is required'}), 400
    return jsonify({'correct': check_answer(word, data.get('answer'))})


@app.route('/api/practice/score', methods=['POST'])
def score_practice_round():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        duration = int(data.get('duration', 0))
        if duration not in ROUND_DURATIONS:
            raise ValueError(f'不支持的练习时长: {duration}')
        result = score_round(int(data.get('score', 0)), int(data.get('mistakes', 0)), duration)
    except (TypeError, ValueError):
        durations = '/'.join(str(d) for d in ROUND_DURATIONS)
        return jsonify({'error': f'score 和 mistakes 必须是整数，duration 必须是 {durations} 之一'}), 400
    return jsonify(result)


@app.route('/api/dictionary', methods=['GET'])
def lookup_dictionary():
    term = request.args.get('term')
    if not term:
        return jsonify({'error': 'Term is required'}), 400

    data = lookup_term(term)
    if data is None:
        return jsonify({'error': 'Failed to fetch dictionary data'}), 500
    return jsonify(data)


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=True)

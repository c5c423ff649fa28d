# services.py
import logging

import requests

from config import Config

logger = logging.getLogger(__name__)


def lookup_term(term):
    """查词典（Jisho），原样返回 JSON；失败时返回 None"""
    if not term:
        return None

    try:
        response = requests.get(
            Config.DICTIONARY_API_URL,
            params={"keyword": term},
            timeout=10
        )

        if response.status_code == 200:
            return response.json()
        else:
            logger.error('词典服务返回错误: %s', response.status_code)
            return None
    except (requests.RequestException, ValueError) as e:
        logger.error('词典查询失败 %r: %s', term, e)
        return None

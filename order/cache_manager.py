import hashlib
import json
import logging

import redis
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger('django')


class CacheManager:
    """redis 缓存，连接失败时降级为不缓存"""

    def __init__(self, redis_client=None):
        self.redis_client = redis_client or redis.StrictRedis.from_url(settings.REDIS_URL, decode_responses=True)

    def _get_key(self, namespace, params):
        params_hash = hashlib.md5(json.dumps(params, sort_keys=True).encode('utf-8')).hexdigest()
        return f"{namespace}:{params_hash}"

    def get_json(self, namespace, params):
        key = self._get_key(namespace, params)
        try:
            result_str = self.redis_client.get(key)
        except redis.exceptions.RedisError as e:
            logger.error(f"cache read failed for {key}: {e}")
            return None  # 降级处理
        return json.loads(result_str) if result_str else None

    def set_json(self, namespace, params, value, ttl=300):  # 默认5分钟
        key = self._get_key(namespace, params)
        try:
            self.redis_client.set(key, json.dumps(value, cls=DjangoJSONEncoder), ex=ttl)
        except redis.exceptions.RedisError as e:
            logger.error(f"cache write failed for {key}: {e}")  # 降级处理

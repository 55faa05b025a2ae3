# storefront/cache.py
import redis
from flask import current_app

from .errors import UpstreamError

_EXT_KEY = "storefront.cache"


class KeyValueCache:
    """Thin get/set/delete capability over a Redis client.

    The client comes from ``CACHE_CLIENT`` when the app injects one (tests use
    fakeredis), otherwise it is built from ``REDIS_URL``. Values are strings.
    Redis failures surface as ``UpstreamError``; nothing is retried.
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        client = app.config.get("CACHE_CLIENT")
        if client is None:
            client = redis.Redis.from_url(app.config["REDIS_URL"], decode_responses=True)
        app.extensions[_EXT_KEY] = client

    @property
    def client(self):
        return current_app.extensions[_EXT_KEY]

    def get(self, key):
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise UpstreamError("Cache unavailable", str(e)) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key, value, ttl=None):
        try:
            if ttl:
                self.client.set(key, value, ex=int(ttl))
            else:
                self.client.set(key, value)
        except redis.RedisError as e:
            raise UpstreamError("Cache unavailable", str(e)) from e

    def delete(self, key):
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise UpstreamError("Cache unavailable", str(e)) from e

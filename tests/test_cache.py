from unittest.mock import MagicMock

import pytest
import redis

from filtercache.config import Settings
from filtercache.dependencies import get_cache_manager, get_redis_client
from filtercache.exceptions import (
    CacheBackendError,
    InvalidRuntimeFiltersError,
    ResolverNotFoundError,
)
from filtercache.models import Binary
from filtercache.redis import client as client_module
from filtercache.services.cache import CacheManager, RedisResolver, Signer, WebPathResolver
from filtercache.services.cache import resolvers as resolvers_module

from conftest import MemoryResolver

BINARY = Binary(content=b"\xff\xd8\xffdata", mime_type="image/jpeg", format="jpeg")


def test_signer_is_deterministic():
    signer = Signer("secret")
    runtime = {"thumbnail": {"size": [50, 50], "mode": "inset"}}

    signature = signer.sign("/img/a.jpg", runtime)

    assert signature == signer.sign("/img/a.jpg", runtime)
    assert signature != signer.sign("/img/b.jpg", runtime)
    assert "=" not in signature and "/" not in signature


def test_signer_ignores_option_key_order():
    signer = Signer("secret")
    a = signer.sign("/img/a.jpg", {"thumbnail": {"size": [50, 50], "mode": "inset"}})
    b = signer.sign("/img/a.jpg", {"thumbnail": {"mode": "inset", "size": [50, 50]}})
    assert a == b


def test_signer_depends_on_secret():
    runtime = {"rotate": {"angle": 90}}
    assert Signer("one").sign("/a.jpg", runtime) != Signer("two").sign("/a.jpg", runtime)


def test_signer_rejects_empty_secret():
    with pytest.raises(ValueError):
        Signer("")


@pytest.mark.parametrize("runtime", [[{"rotate": {}}], "rotate", {"rotate": 90}])
def test_runtime_path_rejects_malformed_runtime_filters(runtime):
    cache = CacheManager(Signer("secret"))
    with pytest.raises(InvalidRuntimeFiltersError):
        cache.get_runtime_path("/img/a.jpg", runtime)


def test_runtime_paths_are_distinct_for_distinct_filter_sets():
    cache = CacheManager(Signer("secret"))
    filter_sets = [
        {},
        {"rotate": {"angle": 90}},
        {"rotate": {"angle": 180}},
        {"rotate": {"angle": 90}, "grayscale": {}},
        {"grayscale": {}, "rotate": {"angle": 90}},
        {"thumbnail": {"size": [50, 50]}},
        {"thumbnail": {"size": [50, 51]}},
    ]

    paths = [cache.get_runtime_path("/img/a.jpg", fs) for fs in filter_sets]

    assert len(set(paths)) == len(filter_sets)
    assert all(p.startswith("rc/") and p.endswith("/img/a.jpg") for p in paths)
    assert cache.get_runtime_path("/img/a.jpg", {}) != cache.get_runtime_path("/img/b.jpg", {})


def test_cache_manager_dispatches_to_default_and_named_resolvers():
    default, other = MemoryResolver("d://"), MemoryResolver("o://")
    cache = CacheManager(Signer("secret"), default_resolver="main")
    cache.add_resolver("main", default)
    cache.add_resolver("other", other)

    cache.store(BINARY, "a.jpg", "thumbnail")
    cache.store(BINARY, "b.jpg", "thumbnail", "other")

    assert cache.is_stored("a.jpg", "thumbnail")
    assert not cache.is_stored("a.jpg", "thumbnail", "other")
    assert cache.is_stored("b.jpg", "thumbnail", "other")
    assert cache.resolve("a.jpg", "thumbnail") == "d://thumbnail/a.jpg"
    assert cache.resolve("b.jpg", "thumbnail", "other") == "o://thumbnail/b.jpg"
    assert cache.resolver_names() == ["main", "other"]


def test_cache_manager_unknown_resolver():
    cache = CacheManager(Signer("secret"))
    with pytest.raises(ResolverNotFoundError) as excinfo:
        cache.is_stored("a.jpg", "thumbnail", "nope")
    assert isinstance(excinfo.value, CacheBackendError)
    assert excinfo.value.name == "nope"


def test_cache_manager_remove_from_every_resolver():
    first, second = MemoryResolver(), MemoryResolver()
    cache = CacheManager(Signer("secret"))
    cache.add_resolver("default", first)
    cache.add_resolver("second", second)
    cache.store(BINARY, "a.jpg", "thumbnail")
    cache.store(BINARY, "a.jpg", "thumbnail", "second")

    cache.remove("a.jpg", "thumbnail")
    cache.remove("a.jpg", "thumbnail")

    assert first.entries == {} and second.entries == {}


def test_web_path_resolver_round_trip(tmp_path):
    resolver = WebPathResolver(tmp_path / "cache", "/media/cache/")

    assert not resolver.is_stored("/img/a.jpg", "thumbnail")
    resolver.store(BINARY, "/img/a.jpg", "thumbnail")

    stored = tmp_path / "cache" / "thumbnail" / "img" / "a.jpg"
    assert stored.read_bytes() == BINARY.content
    assert resolver.is_stored("/img/a.jpg", "thumbnail")
    assert resolver.resolve("/img/a.jpg", "thumbnail") == "/media/cache/thumbnail/img/a.jpg"

    resolver.remove("/img/a.jpg", "thumbnail")
    assert not stored.exists()
    resolver.remove("/img/a.jpg", "thumbnail")


def test_web_path_resolver_quotes_urls(tmp_path):
    resolver = WebPathResolver(tmp_path, "/media/cache")
    assert resolver.resolve("my photos/a b.jpg", "thumbnail") == (
        "/media/cache/thumbnail/my%20photos/a%20b.jpg"
    )


def test_web_path_resolver_rejects_escaping_paths(tmp_path):
    resolver = WebPathResolver(tmp_path / "cache")
    with pytest.raises(CacheBackendError):
        resolver.store(BINARY, "../../etc/passwd", "thumbnail")


def test_web_path_resolver_failed_write_leaves_nothing_stored(tmp_path, monkeypatch):
    resolver = WebPathResolver(tmp_path / "cache")

    def fail_replace(src, dst):
        raise OSError("No space left on device")

    monkeypatch.setattr(resolvers_module.os, "replace", fail_replace)

    with pytest.raises(CacheBackendError) as excinfo:
        resolver.store(BINARY, "/img/a.jpg", "thumbnail")

    assert isinstance(excinfo.value.__cause__, OSError)
    assert not resolver.is_stored("/img/a.jpg", "thumbnail")
    assert list((tmp_path / "cache" / "thumbnail" / "img").iterdir()) == []


def test_web_path_resolver_overwrites_existing_entry(tmp_path):
    resolver = WebPathResolver(tmp_path)
    resolver.store(BINARY, "a.jpg", "thumbnail")
    replacement = Binary(content=b"new", mime_type="image/jpeg", format="jpeg")

    resolver.store(replacement, "a.jpg", "thumbnail")

    assert (tmp_path / "thumbnail" / "a.jpg").read_bytes() == b"new"
    assert sorted(p.name for p in (tmp_path / "thumbnail").iterdir()) == ["a.jpg"]


def test_redis_resolver_commands():
    client = MagicMock()
    client.exists.return_value = 1
    pipe = client.pipeline.return_value.__enter__.return_value
    resolver = RedisResolver(client, url_prefix="/media/redis", prefix="img", ttl_seconds=60)

    resolver.store(BINARY, "/img/a.jpg", "thumbnail")
    assert resolver.is_stored("/img/a.jpg", "thumbnail")
    resolver.remove("/img/a.jpg", "thumbnail")

    client.pipeline.assert_called_once_with(transaction=True)
    pipe.hset.assert_called_once_with(
        "img:thumbnail:img/a.jpg",
        mapping={"content": BINARY.content, "mime_type": "image/jpeg", "format": "jpeg"},
    )
    pipe.expire.assert_called_once_with("img:thumbnail:img/a.jpg", 60)
    pipe.execute.assert_called_once()
    client.exists.assert_called_once_with("img:thumbnail:img/a.jpg")
    client.delete.assert_called_once_with("img:thumbnail:img/a.jpg")
    assert resolver.resolve("/img/a.jpg", "thumbnail") == "/media/redis/thumbnail/img/a.jpg"


def test_redis_resolver_without_ttl_does_not_expire():
    client = MagicMock()
    pipe = client.pipeline.return_value.__enter__.return_value

    RedisResolver(client).store(BINARY, "a.jpg", "thumbnail")

    pipe.expire.assert_not_called()
    pipe.execute.assert_called_once()


def test_redis_resolver_wraps_errors():
    client = MagicMock()
    client.exists.side_effect = redis.ConnectionError("down")
    client.pipeline.return_value.__enter__.return_value.execute.side_effect = (
        redis.ConnectionError("down")
    )
    resolver = RedisResolver(client)

    with pytest.raises(CacheBackendError) as excinfo:
        resolver.is_stored("a.jpg", "thumbnail")
    assert isinstance(excinfo.value.__cause__, redis.ConnectionError)

    with pytest.raises(CacheBackendError):
        resolver.store(BINARY, "a.jpg", "thumbnail")


def test_redis_client_connects_with_settings(monkeypatch):
    pool_factory = MagicMock()
    redis_instance = MagicMock()
    monkeypatch.setattr(client_module.ConnectionPool, "from_url", pool_factory)
    monkeypatch.setattr(client_module, "Redis", MagicMock(return_value=redis_instance))
    settings = Settings(redis_url="redis://cache:6379/1", redis_socket_timeout=2.0)

    redis_client = client_module.RedisClient(settings)
    with pytest.raises(RuntimeError):
        redis_client.client
    redis_client.connect()

    pool_factory.assert_called_once_with(
        "redis://cache:6379/1", socket_timeout=2.0, socket_connect_timeout=2.0
    )
    redis_instance.ping.assert_called_once()
    assert redis_client.client is redis_instance

    redis_client.disconnect()
    pool_factory.return_value.disconnect.assert_called_once()
    with pytest.raises(RuntimeError):
        redis_client.client


def test_get_redis_client_requires_url():
    assert get_redis_client(Settings(redis_url=None)) is None


def test_get_redis_client_wraps_connection_errors(monkeypatch):
    redis_instance = MagicMock()
    redis_instance.ping.side_effect = redis.ConnectionError("refused")
    monkeypatch.setattr(client_module.ConnectionPool, "from_url", MagicMock())
    monkeypatch.setattr(client_module, "Redis", MagicMock(return_value=redis_instance))

    with pytest.raises(CacheBackendError) as excinfo:
        get_redis_client(Settings(redis_url="redis://cache:6379/0"))
    assert isinstance(excinfo.value.__cause__, redis.ConnectionError)


def test_redis_resolver_registered_when_configured(tmp_path):
    redis_client = MagicMock()
    settings = Settings(
        redis_url="redis://cache:6379/0",
        cache_root=str(tmp_path),
        redis_url_prefix="/r",
        secret="s",
    )

    cache = get_cache_manager(settings, redis_client)

    assert cache.resolver_names() == ["default", "redis"]
    assert cache.resolve("a.jpg", "thumbnail", "redis") == "/r/thumbnail/a.jpg"
    redis_client.connect.assert_not_called()

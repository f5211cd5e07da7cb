# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: containers start once per pytest session
- function scope: fresh collections / key prefixes per test for isolation

Containers are reached through their bridge network IP and internal port,
which works both on a plain host and inside a devcontainer using
docker-outside-of-docker (where localhost:mapped_port is unreachable).
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "arangodb: marks tests requiring ArangoDB container")
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
            logger.debug("Container IP empty, attempt %d/%d", attempt + 1, max_attempts)
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


@pytest.fixture
def unique_collection() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"


# =====================================================================
#  ARANGODB CONTAINER: session scope (bridge IP)
# =====================================================================

ARANGO_IMAGE = "arangodb:3.12"
ARANGO_INTERNAL_PORT = 8529
ARANGO_ROOT_PASSWORD = "testpassword"


@pytest.fixture(scope="session")
def arangodb_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = (
        DockerContainer(ARANGO_IMAGE)
        .with_exposed_ports(ARANGO_INTERNAL_PORT)
        .with_env("ARANGO_ROOT_PASSWORD", ARANGO_ROOT_PASSWORD)
    )
    container.start()
    wait_for_logs(container, predicate=r"ArangoDB.*is ready for business", timeout=60)
    time.sleep(2)

    ip = _get_container_bridge_ip(container)
    logger.info("ArangoDB ready at %s:%d", ip, ARANGO_INTERNAL_PORT)
    yield {"host": ip, "port": ARANGO_INTERNAL_PORT, "password": ARANGO_ROOT_PASSWORD}
    container.stop()


@pytest.fixture(scope="session")
def arangodb_url(arangodb_container) -> str:
    c = arangodb_container
    return f"http://{c['host']}:{c['port']}"


@pytest.fixture
def arangodb_document_store(arangodb_url):
    from docsearch.store.arangodb_store import ArangoDocumentStore
    store = ArangoDocumentStore(
        url=arangodb_url, database="_system", user="root", password=ARANGO_ROOT_PASSWORD,
    )
    known_before = set(store._known)
    yield store
    for name in store._known - known_before:
        try:
            if store._db.has_collection(name):
                store._db.delete_collection(name)
        except Exception:
            logger.debug("Could not drop collection %s", name)


@pytest.fixture
def arangodb_search_cache(arangodb_url):
    from docsearch.cache.arangodb_store import ArangoSearchCacheStore
    collection = f"test_cache_{uuid.uuid4().hex[:8]}"
    cache = ArangoSearchCacheStore(
        url=arangodb_url, database="_system", user="root",
        password=ARANGO_ROOT_PASSWORD, collection=collection, ttl_seconds=60,
    )
    yield cache
    try:
        cache._db.delete_collection(collection)
    except Exception:
        logger.debug("Could not drop collection %s", collection)


# =====================================================================
#  REDIS CONTAINER: session scope (bridge IP)
# =====================================================================

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    ip = _get_container_bridge_ip(container)
    logger.info("Redis ready at %s:%d", ip, REDIS_INTERNAL_PORT)
    yield {"host": ip, "port": REDIS_INTERNAL_PORT}
    container.stop()


@pytest.fixture(scope="session")
def redis_url(redis_container) -> str:
    c = redis_container
    return f"redis://{c['host']}:{c['port']}/0"


@pytest.fixture
def redis_search_cache(redis_url):
    from docsearch.cache.redis_store import RedisSearchCacheStore
    cache = RedisSearchCacheStore(redis_url=redis_url, ttl_seconds=60)
    cache._client.flushdb()
    yield cache
    cache.close()

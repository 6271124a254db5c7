import os
import sys
import pytest
from fastapi.testclient import TestClient

# 确保项目根目录在 sys.path 中
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from logging_config import get_colorful_logger
from auth.flow import AuthenticationFlow
from auth.keys import SigningKey
from auth.provider import TokenProvider
from auth.store import InMemoryUserStore

TEST_SECRET = b"0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
START_TS = 1_700_000_000


class FakeClock:
    """可手动拨动的时钟，返回整数秒"""

    def __init__(self, now: int = START_TS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def logger():
    """提供一个带彩色格式的测试级别 logger"""
    return get_colorful_logger("tests")


@pytest.fixture
def key():
    return SigningKey(TEST_SECRET)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider(key, clock):
    return TokenProvider(key, clock=clock)


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def flow(store, provider):
    return AuthenticationFlow(store, provider)


@pytest.fixture
def client(flow):
    """
    基于内存用户存储与固定密钥的完整应用客户端。
    token 使用 FakeClock 计时，便于测试过期。
    """
    from main import create_app
    with TestClient(create_app(flow)) as c:
        yield c


@pytest.fixture
def signup_body():
    return {
        "username": "testuser",
        "email": "test@example.com",
        "fullName": "Test User",
        "password": "TestPassword123",
    }

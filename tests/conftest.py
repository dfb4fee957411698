"""
pytest配置文件，定义测试环境和共享的测试夹具（fixtures）。

主要功能：
1. 使用内存 SQLite 作为测试数据库（每个测试一个独立的库）
2. 提供数据库会话与会话工厂
3. 提供FastAPI测试客户端与签好名的令牌
4. 提供造数函数（活动、采样点）

环境变量必须在导入 biopeak.main 之前设置。
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BATCH_DELAY_SECONDS"] = "0"
os.environ.pop("JWT_AUDIENCE", None)

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from biopeak.auth import create_access_token
from biopeak.db.models import Activity, ActivitySample
from biopeak.db_base import Base
from biopeak.main import app
from biopeak.utils import get_db, get_session_factory

USER_ID = "6f1c2a8e-0000-4000-8000-000000000001"
OTHER_USER_ID = "6f1c2a8e-0000-4000-8000-000000000002"
TODAY = date(2025, 3, 14)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def session_factory():
    """每个测试一个全新的内存库；StaticPool 让多个会话共用同一个连接"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    """提供数据库会话"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """提供FastAPI测试客户端"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}


@pytest.fixture
def other_user_headers():
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}


@pytest.fixture
def service_headers():
    return {"Authorization": f"Bearer {create_access_token(None, role='service_role')}"}


@pytest.fixture
def make_activity(db_session):
    """造一条活动记录，days_ago 相对 TODAY"""
    def _make(activity_id="a1", days_ago=0, user_id=USER_ID, minutes=60.0, avg_hr=150.0,
              max_hr=190.0, calories=600.0, activity_type="running", distance=10000.0):
        row = Activity(
            user_id=user_id,
            activity_id=activity_id,
            source="garmin",
            activity_type=activity_type,
            activity_date=TODAY - timedelta(days=days_ago),
            total_time_minutes=minutes,
            total_distance_meters=distance,
            average_heart_rate=avg_hr,
            max_heart_rate=max_hr,
            active_kilocalories=calories,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _make


@pytest.fixture
def make_samples(db_session):
    """为活动写入采样点"""
    def _make(distance, time, activity_id="a1", user_id=USER_ID):
        for d, t in zip(distance, time):
            db_session.add(ActivitySample(
                user_id=user_id,
                activity_id=activity_id,
                total_distance_meters=d,
                sample_time_seconds=t,
            ))
        db_session.commit()
    return _make


@pytest.fixture
def sample_stream():
    """7 个采样点：最快的 1 公里是 0m -> 1000m，用时 300 秒（5.0 分钟/公里）"""
    return {
        "distance": [0, 300, 700, 1000, 1300, 1700, 2000],
        "time": [0, 90, 210, 300, 400, 520, 600],
    }

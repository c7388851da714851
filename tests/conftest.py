"""
测试夹具：每个用例使用独立的内存 SQLite 数据库
"""
import pytest
from flask import Flask
from sqlalchemy.pool import StaticPool

from api import create_api_blueprint
from database.engine import Database
from utils.dependency_store import DependencyStore
from utils.hierarchy_service import HierarchyService
from utils.progress_aggregator import ProgressAggregator


@pytest.fixture()
def database():
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    yield db
    db.close()


@pytest.fixture()
def aggregator(database):
    return ProgressAggregator(database, in_progress_weight=50)


@pytest.fixture()
def service(database, aggregator):
    return HierarchyService(database, aggregator)


@pytest.fixture()
def store(database):
    return DependencyStore(database)


@pytest.fixture()
def strategy(service):
    return service.create_strategy({"title": "Grow revenue", "organization_id": "org-1"})


@pytest.fixture()
def project(service, strategy):
    return service.create_project({"strategy_id": strategy["id"], "title": "Launch EU"})


@pytest.fixture()
def client(database):
    app = Flask(__name__)
    app.register_blueprint(create_api_blueprint(database))
    return app.test_client()

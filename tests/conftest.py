import pytest
import requests
from fastapi.testclient import TestClient

from docscan.api.main import app
from docscan.storage import repository
from docscan.utils import llm_config
from tests.fakes import FakeHTTP, FakeLM, FakeStudentStore, LMScript


@pytest.fixture
def lm_script(monkeypatch):
    script = LMScript()

    def _get_dspy_lm(model_name):
        lm = FakeLM(model_name, script)
        script.instances.append(lm)
        return lm

    monkeypatch.setattr(llm_config, "get_dspy_lm", _get_dspy_lm)
    return script


@pytest.fixture
def http(monkeypatch):
    fake = FakeHTTP()
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


@pytest.fixture
def store(monkeypatch):
    fake = FakeStudentStore()
    monkeypatch.setattr(repository, "load_student", fake.load_student)
    monkeypatch.setattr(repository, "save_validation", fake.save_validation)
    return fake


@pytest.fixture
def client():
    return TestClient(app)

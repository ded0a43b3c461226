from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(scope="session")
def app():
    # Must be set before importing modules that read settings at import time.
    os.environ["OPENAI_API_KEY"] = "sk-test"
    os.environ["LAW_FIRM_EMAIL"] = "firm@example.com"
    os.environ.pop("SMTP_HOST", None)
    os.environ.pop("TWILIO_ACCOUNT_SID", None)
    os.environ.pop("STRIPE_SECRET_KEY", None)

    import importlib

    for module_name in [
        "config.settings",
        "api.dependencies",
        "api.routes",
        "api.twilio_routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def fake_engine():
    from fakes import FakeEngine

    return FakeEngine()


@pytest.fixture()
def fake_services(app, fake_engine):
    from api.dependencies import ReceptionServices
    from config.settings import get_settings
    from fakes import FakeNotifier
    from reception.tool_handlers import ToolHandlers

    settings = get_settings()
    notifier = FakeNotifier()
    handlers = ToolHandlers(
        notifier=notifier,
        firm_name=settings.law_firm_name,
        law_firm_email=settings.law_firm_email,
    )
    return ReceptionServices(
        settings=settings,
        notifier=notifier,
        handlers=handlers,
        engine=fake_engine,
    )


@pytest.fixture()
def client(app, fake_services):
    # Override services so tests never build SMTP/Twilio/realtime clients.
    import api.dependencies as deps

    app.dependency_overrides[deps.get_services] = lambda: fake_services

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

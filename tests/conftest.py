from __future__ import annotations

import pytest

from paramify.config import ParamifyConfig
from paramify.engine import ParamifyEngine
from tests._fakes import ADMIN, NOW, FakeUsgsProvider


@pytest.fixture
def provider() -> FakeUsgsProvider:
    return FakeUsgsProvider()


@pytest.fixture
def engine(provider: FakeUsgsProvider) -> ParamifyEngine:
    return ParamifyEngine(
        ParamifyConfig(),
        deployer=ADMIN,
        transport=provider,
        clock=lambda: NOW,
    )

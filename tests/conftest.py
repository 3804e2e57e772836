import pytest

from livestack.config.provider import AwsConfig
from livestack.core.app import App


@pytest.fixture
def app():
    """App deploying to Tokyo with the ``region`` variable set."""
    return App(config=AwsConfig(region="ap-northeast-1"), environ={"region": "ap-northeast-1"})


@pytest.fixture
def bare_app():
    """App with an empty environment snapshot."""
    return App(config=AwsConfig(region="us-west-2"), environ={})

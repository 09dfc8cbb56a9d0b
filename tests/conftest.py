import pytest

from techprobe.core.config import ConfigManager
from techprobe.core.logging import Logger
from techprobe.engine.artifact import PageArtifact


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.techprobe and the system keyring."""
    store = {}
    monkeypatch.setattr(ConfigManager, "CONFIG_FILE", tmp_path / ".techprobe" / "config.json")
    monkeypatch.setattr("keyring.get_password", lambda service, name: store.get((service, name)))
    monkeypatch.setattr("keyring.set_password", lambda service, name, value: store.__setitem__((service, name), value))
    yield store
    logger = Logger.get_logger()
    for handler in list(logger.handlers):
        Logger.remove_handler(handler)


@pytest.fixture
def wordpress_php_page():
    html = (
        '<html><head><meta name="generator" content="WordPress 6.3">'
        '<title>My Blog</title></head><body><p>Hello</p></body></html>'
    )
    return PageArtifact.from_response(html, headers={"X-Powered-By": "PHP/8.1"})


@pytest.fixture
def facebook_page():
    html = (
        '<html><body>'
        '<script async src="https://connect.facebook.net/en_US/sdk.js"></script>'
        '<div class="fb-comments" data-numposts="5"></div>'
        '</body></html>'
    )
    return PageArtifact.from_response(html)

import pytest

from match_scraper import StaticDocument
from tests.pages import EMPTY_PAGE, MATCHES_UNLABELLED, MATCHES_V1, MATCHES_V2


@pytest.fixture
def v1_document():
    return StaticDocument(MATCHES_V1, url="https://example.com/jogos")


@pytest.fixture
def v2_document():
    return StaticDocument(MATCHES_V2, url="https://example.com/jogos")


@pytest.fixture
def unlabelled_document():
    return StaticDocument(MATCHES_UNLABELLED)


@pytest.fixture
def empty_document():
    return StaticDocument(EMPTY_PAGE)

import pytest

from dlge import DLGE
from hashlist import HashList
from helpers import LINES, SWITCHES, TAGS, make_meta
from language_map import Version


@pytest.fixture
def hashlist():
    return HashList.from_symbols(tags=TAGS, switches=SWITCHES, lines=LINES)


@pytest.fixture
def converter(hashlist):
    """H3 converter with a short two language map, as a modding tool would pass."""
    return DLGE(hashlist, Version.H3, lang_map="xx,en")


@pytest.fixture
def h3_converter(hashlist):
    return DLGE(hashlist, Version.H3)


@pytest.fixture
def meta():
    return make_meta

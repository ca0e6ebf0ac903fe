from datetime import datetime

import pytest

from notetemplate.config import TemplatingConfig
from notetemplate.context import NoteInfo
from notetemplate.engine import TemplatingEngine
from notetemplate.lookup import DictTemplateLookup
from notetemplate.namespace import HelperNamespaceBuilder

# Friday
FIXED_NOW = datetime(2024, 3, 15, 9, 5, 7)


@pytest.fixture()
def clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def config():
    return TemplatingConfig(
        user_first_name="Ada",
        user_last_name="Lovelace",
        user_email="ada@example.com",
    )


@pytest.fixture()
def note():
    return NoteInfo(
        title="Weekly Review",
        filename="Reviews/weekly.md",
        content="# Weekly Review\n* [ ] Plan sprint\n* [x] Ship release\n- [ ] Email Bob\n",
        selection="Ship release",
    )


@pytest.fixture()
def helpers(config, note, clock):
    return HelperNamespaceBuilder(config, note, clock).build()


@pytest.fixture()
def templates():
    return {
        "header": "H",
        "footer": "F",
    }


@pytest.fixture()
def engine(config, note, clock, templates):
    return TemplatingEngine(
        config=config,
        lookup=DictTemplateLookup(templates),
        note=note,
        clock=clock,
    )

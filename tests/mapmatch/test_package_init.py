import importlib

import mapmatch
from mapmatch import _about


def test_public_names_resolve():
    for name in mapmatch.__all__:
        assert hasattr(mapmatch, name), name


def test_metadata_is_reexported():
    assert mapmatch.__version__ == _about.__version__
    assert mapmatch.__license__ == "MIT"


def test_reload_keeps_exports():
    module = importlib.reload(mapmatch)
    assert module.locate is mapmatch.localization.locate
    assert module.match is mapmatch.core.matching.match

import logging

from git_helper.logging_utils import level_for


def test_level_for_maps_verbosity_counts():
    assert level_for(0) == logging.WARNING
    assert level_for(1) == logging.INFO
    assert level_for(2) == logging.DEBUG
    assert level_for(5) == logging.DEBUG

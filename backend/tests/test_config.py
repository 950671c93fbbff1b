import random

import pytest

from config import parse_seed
from trivia import create_app


class BadSeedConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    MASTER_RNG_SEED = 'abc'


class SeededConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    MASTER_RNG_SEED = '7'


@pytest.mark.parametrize('value,expected', [(None, None), ('', None), ('  ', None), ('7', 7), (42, 42)])
def test_parse_seed(value, expected):
    assert parse_seed(value) == expected


def test_parse_seed_rejects_non_numeric():
    with pytest.raises(ValueError, match='MASTER_RNG_SEED must be an integer'):
        parse_seed('abc')


def test_create_app_reports_bad_seed():
    with pytest.raises(ValueError, match='MASTER_RNG_SEED'):
        create_app(BadSeedConfig)


def test_seeded_apps_share_master_randomness():
    first = create_app(SeededConfig).extensions['trivia'].rng
    second = create_app(SeededConfig).extensions['trivia'].rng
    expected = random.Random(7)
    draws = [expected.random() for _ in range(3)]
    assert [first.random() for _ in range(3)] == draws
    assert [second.random() for _ in range(3)] == draws

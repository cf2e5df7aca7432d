from pathlib import Path

import pytest

from lovelyswap.utils.dict import deep_merge
from lovelyswap.utils.yaml import dict_from_extended_yaml, dict_from_yaml

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


def test_dict_from_yaml_invalid_filepath():
    with pytest.raises(ValueError) as e:
        dict_from_yaml(filepath='fake_file.yml')

    assert str(e.value) == "'fake_file.yml' is not a file"


def test_dict_from_yaml_empty():
    result = dict_from_yaml(filepath=FIXTURES_DIR / 'empty.yml')

    assert result == {}


def test_dict_from_yaml_invalid_contents():
    filepath = FIXTURES_DIR / 'number.yml'

    with pytest.raises(ValueError) as e:
        dict_from_yaml(filepath=filepath)

    assert str(e.value) == f"'{filepath}' cannot be parsed as a dictionary"


def test_dict_from_yaml_valid():
    result = dict_from_yaml(filepath=FIXTURES_DIR / 'valid.yml')

    assert result == dict(a=1, b=dict(c=2, d=3))


def test_dict_from_extended_yaml_invalid_filepath():
    with pytest.raises(ValueError) as e:
        dict_from_extended_yaml(filepath='fake_file.yml')

    assert str(e.value) == "'fake_file.yml' is not a file"


def test_dict_from_extended_yaml_empty():
    result = dict_from_extended_yaml(filepath=FIXTURES_DIR / 'empty.yml')

    assert result == {}


def test_dict_from_extended_yaml_valid():
    result = dict_from_extended_yaml(filepath=FIXTURES_DIR / 'valid.yml')

    assert result == dict(a=1, b=dict(c=2, d=3))


def test_dict_from_extended_yaml_empty_extends():
    result = dict_from_extended_yaml(filepath=FIXTURES_DIR / 'empty_extends.yml')

    assert result == dict(a='aa', b=dict(d='dd', e='ee'))


def test_dict_from_extended_yaml_invalid_extends():
    with pytest.raises(ValueError) as e:
        dict_from_extended_yaml(filepath=FIXTURES_DIR / 'invalid_extends.yml')

    assert "/fixtures/unknown_file.yml' is not a file" in str(e.value)


def test_dict_from_extended_yaml_self_extends():
    filepath = FIXTURES_DIR / 'self_extends.yml'

    with pytest.raises(ValueError) as e:
        dict_from_extended_yaml(filepath=filepath)

    assert str(e.value) == f"'{filepath}' cannot extend itself"


def test_dict_from_extended_yaml_valid_extends():
    result = dict_from_extended_yaml(filepath=FIXTURES_DIR / 'valid_extends.yml')

    assert result == dict(a='aa', b=dict(c=2, d='dd', e='ee'))


def test_dict_from_extended_yaml_chained_extends():
    result = dict_from_extended_yaml(filepath=FIXTURES_DIR / 'chained_extends.yml')

    assert result == dict(a='aa', b=dict(c='cc', d='dd', e='ee'))


def test_deep_merge():
    first = dict(a=1, b=dict(c=2, d=3), e=dict(f=4))
    deep_merge(first, dict(b=dict(d=5, e=6), e=7))

    assert first == dict(a=1, b=dict(c=2, d=5, e=6), e=7)

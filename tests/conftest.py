import os

from lovelyswap.conf import UNITTESTS_SETTINGS_FILEPATH

os.environ['LOVELYSWAP_CONFIG_YAML'] = os.environ.get('LOVELYSWAP_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)

# Copyright 2024 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys


def main():
    from lovelyswap.cli.util import create_parser
    from lovelyswap.conf.get_settings import get_global_settings
    from lovelyswap.conf.settings import LovelySettings

    parser = create_parser()
    parser.add_argument('--config-yaml', type=str, help='Configuration yaml filepath, defaults to the global settings')
    args = parser.parse_args(sys.argv[1:])

    if args.config_yaml:
        settings = LovelySettings.from_yaml(filepath=args.config_yaml)
    else:
        settings = get_global_settings()

    print(settings.model_dump_json(indent=4))

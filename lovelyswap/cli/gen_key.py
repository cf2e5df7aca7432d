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

import json
import sys


def main():
    from lovelyswap.cli.util import create_parser
    from lovelyswap.crypto.util import (
        generate_private_key,
        get_address_from_public_key,
        get_private_key_bytes,
        get_public_key_bytes,
    )
    parser = create_parser()
    parser.parse_args(sys.argv[1:])

    private_key = generate_private_key()
    public_key = private_key.public_key()

    data = dict(
        private_key_hex=get_private_key_bytes(private_key).hex(),
        public_key_hex=get_public_key_bytes(public_key).hex(),
        address=get_address_from_public_key(public_key).hex(),
    )

    print(json.dumps(data, indent=4))

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
    from lovelyswap.library import pair_for, sort_tokens
    from lovelyswap.types import Address, ContractId

    parser = create_parser()
    parser.add_argument('--factory', type=str, required=True, help='Address of the factory, in hex')
    parser.add_argument('--token-a', type=str, required=True, help='Address of a token, in hex')
    parser.add_argument('--token-b', type=str, required=True, help='Address of the other token, in hex')
    args = parser.parse_args(sys.argv[1:])

    factory = ContractId(bytes.fromhex(args.factory))
    token_a = Address(bytes.fromhex(args.token_a))
    token_b = Address(bytes.fromhex(args.token_b))
    token0, token1 = sort_tokens(token_a, token_b)

    data = dict(
        token0=token0.hex(),
        token1=token1.hex(),
        pair=pair_for(factory, token_a, token_b).hex(),
    )

    print(json.dumps(data, indent=4))

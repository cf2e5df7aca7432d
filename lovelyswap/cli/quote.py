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
    from lovelyswap.library import get_amount_in, get_amount_out

    parser = create_parser()
    amount = parser.add_mutually_exclusive_group(required=True)
    amount.add_argument('--amount-in', type=int, help='Exact amount sold, prints the amount bought')
    amount.add_argument('--amount-out', type=int, help='Exact amount bought, prints the amount sold')
    parser.add_argument('--reserve-in', type=int, required=True, help='Reserve of the token sold')
    parser.add_argument('--reserve-out', type=int, required=True, help='Reserve of the token bought')
    parser.add_argument('--fee', type=int, default=30, help='Total trading fee, in basis points')
    args = parser.parse_args(sys.argv[1:])

    denominator = get_global_settings().FEE_DENOMINATOR
    if args.amount_in is not None:
        print(get_amount_out(args.amount_in, args.reserve_in, args.reserve_out, args.fee, denominator))
    else:
        print(get_amount_in(args.amount_out, args.reserve_in, args.reserve_out, args.fee, denominator))

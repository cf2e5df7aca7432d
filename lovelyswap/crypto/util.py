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

from Crypto.Hash import keccak
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from lovelyswap.types import ADDRESS_LEN, Address

CURVE = ec.SECP256K1()

# keccak256 digests have the same length as SHA-256 ones, which is what `Prehashed` checks.
_PREHASHED_ALGORITHM = ec.ECDSA(Prehashed(hashes.SHA256()))


def keccak256(*parts: bytes) -> bytes:
    """Return the keccak-256 digest of the concatenation of `parts`."""
    hasher = keccak.new(digest_bits=256)
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def encode_uint256(value: int) -> bytes:
    """Encode an unsigned integer as a 32-byte big-endian word."""
    if not 0 <= value < 2**256:
        raise ValueError(f'value out of range for uint256: {value}')
    return value.to_bytes(32, 'big')


def encode_address(address: bytes) -> bytes:
    """Encode an address left-padded to a 32-byte word."""
    assert len(address) == ADDRESS_LEN
    return address.rjust(32, b'\x00')


def get_create2_address(deployer: bytes, salt: bytes, init_code_hash: bytes) -> Address:
    """Derive the address of a contract created by `deployer` with a given salt.

    The address only depends on its inputs, so it can be predicted before the contract exists.

    :param deployer: address of the contract creating the new one
    :param salt: 32-byte salt chosen by the deployer
    :param init_code_hash: keccak256 of what is being deployed
    :return: the 20-byte address
    """
    assert len(salt) == 32
    assert len(init_code_hash) == 32
    return Address(keccak256(b'\xff', deployer, salt, init_code_hash)[12:])


def get_contract_address(deployer: bytes, nonce: int) -> Address:
    """Derive the address of a contract created directly by an account, from the account's nonce."""
    return Address(keccak256(deployer, nonce.to_bytes(8, 'big'))[12:])


def generate_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(CURVE)


def get_private_key_bytes(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the 32-byte big-endian private scalar of a key."""
    return private_key.private_numbers().private_value.to_bytes(32, 'big')


def get_private_key_from_bytes(private_key_bytes: bytes) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(int.from_bytes(private_key_bytes, 'big'), CURVE)


def get_public_key_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Return the uncompressed SEC1 encoding of a public key (65 bytes)."""
    return public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)


def get_public_key_from_bytes(public_key_bytes: bytes) -> ec.EllipticCurvePublicKey:
    """Returns the cryptography ec.EllipticCurvePublicKey from its SEC1 encoding.

    :raises ValueError: if the bytes are not a valid point of the curve
    """
    return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, public_key_bytes)


def get_address_from_public_key_bytes(public_key_bytes: bytes) -> Address:
    """ Calculate the address of a public key

        :param public_key_bytes: public key in SEC1 encoding, compressed or not
        :return: the last 20 bytes of the keccak256 of the uncompressed point, without its prefix
    """
    public_key = get_public_key_from_bytes(public_key_bytes)
    uncompressed = get_public_key_bytes(public_key)
    return Address(keccak256(uncompressed[1:])[12:])


def get_address_from_public_key(public_key: ec.EllipticCurvePublicKey) -> Address:
    return get_address_from_public_key_bytes(get_public_key_bytes(public_key))


def sign_digest(private_key: ec.EllipticCurvePrivateKey, digest: bytes) -> bytes:
    """Sign a 32-byte digest, returning a DER encoded signature."""
    return private_key.sign(digest, _PREHASHED_ALGORITHM)


def is_valid_digest_signature(public_key_bytes: bytes, signature: bytes, digest: bytes) -> bool:
    """Check whether `signature` is a valid signature of `digest` by the given public key."""
    try:
        public_key = get_public_key_from_bytes(public_key_bytes)
    except ValueError:
        return False
    try:
        public_key.verify(signature, digest, _PREHASHED_ALGORITHM)
    except (InvalidSignature, ValueError):
        return False
    return True

from typing import Sequence, Tuple, Union

from eth_keys import keys
from starkware.starknet.core.os.contract_address.contract_address import (
    calculate_contract_address_from_hash,
)
from starkware.starknet.public.abi import get_storage_var_address

from .constants import FIELD_PRIME, SECP256K1_ORDER, U128_MAX, U256_MAX
from .errors import KeyDerivationError


class ContractAddress(int):
    """
    A Starknet contract address. Compares and hashes as the underlying felt.
    """

    def __new__(cls, value: int):
        value = int(value)
        if not 0 <= value < FIELD_PRIME:
            raise ValueError(f"{hex(value)} is not a field element")
        return super().__new__(cls, value)

    def __repr__(self):
        return f"ContractAddress({hex(self)})"


def deployed_address(
    salt: int, class_hash: int, constructor_args: Sequence[int]
) -> ContractAddress:
    """
    Address of a contract deployed through the universal deployer with
    unique=False, which makes the deployer address zero and leaves the caller
    out of the derivation.
    """
    return ContractAddress(
        calculate_contract_address_from_hash(
            salt=salt,
            class_hash=class_hash,
            constructor_calldata=list(constructor_args),
            deployer_address=0,
        )
    )


def proxy_address(
    deployer_address: int, owner_seed: int, proxy_class_hash: int
) -> ContractAddress:
    """
    Address of an account proxy deployed by `deployer_address` with the
    owner's evm address as salt and no constructor calldata.
    """
    return ContractAddress(
        calculate_contract_address_from_hash(
            salt=owner_seed,
            class_hash=proxy_class_hash,
            constructor_calldata=[],
            deployer_address=deployer_address,
        )
    )


def storage_slot_address(variable_name: str, key_tuple: Sequence[int] = ()) -> int:
    return get_storage_var_address(variable_name, *key_tuple)


def evm_address(private_key: Union[bytes, str, int]) -> int:
    """
    Ethereum address of a secp256k1 private key, as a felt.

    The key is 32 big endian bytes, a hex string of them or an int.
    """
    try:
        if isinstance(private_key, str):
            hex_key = private_key[2:] if private_key.startswith("0x") else private_key
            private_key = bytes.fromhex(hex_key)
        elif isinstance(private_key, int):
            private_key = private_key.to_bytes(32, "big")
    except (ValueError, OverflowError) as exc:
        raise KeyDerivationError(exc) from exc

    if len(private_key) != 32:
        raise KeyDerivationError(f"expected 32 bytes, got {len(private_key)}")
    if not 0 < int.from_bytes(private_key, "big") < SECP256K1_ORDER:
        raise KeyDerivationError("not in the secp256k1 scalar range")

    pk = keys.PrivateKey(private_key)
    return int.from_bytes(pk.public_key.to_canonical_address(), "big")


def split_u256(value: int) -> Tuple[int, int]:
    """
    Splits a u256 into (low, high) 128 bit limbs.
    """
    if not 0 <= value <= U256_MAX:
        raise ValueError(f"{value} does not fit in 256 bits")
    return (value & U128_MAX, value >> 128)


def join_u256(low: int, high: int) -> int:
    if not (0 <= low <= U128_MAX and 0 <= high <= U128_MAX):
        raise ValueError(f"limbs ({low}, {high}) do not fit in 128 bits")
    return low + (high << 128)

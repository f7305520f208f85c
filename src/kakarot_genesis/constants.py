"""Constants used across the project."""

import os

from starkware.cairo.lang.cairo_constants import DEFAULT_PRIME

# this is set to "dev" to get full tracebacks in the log output
DEV_MODE = os.environ.get("KAKAROT_GENESIS_PROFILE") == "dev"

# upper bound of the class loading pool, None lets the executor decide
MAX_WORKERS = (
    int(os.environ["KAKAROT_GENESIS_WORKERS"])
    if os.environ.get("KAKAROT_GENESIS_WORKERS")
    else None
)

# allowed libfuncs list passed to the Sierra to CASM compiler
ALLOWED_LIBFUNCS_LIST_NAME = os.environ.get("KAKAROT_GENESIS_LIBFUNCS", "all")

FIELD_PRIME = DEFAULT_PRIME

# all-zero 32 bytes
SALT = 0

U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1

# katana's pre-deployed fee token
DEFAULT_FEE_TOKEN_ADDRESS = (
    0x49D36570D4E46F48E99674BD3FCC84644DDD6B96F7C741B1562B82F9E004DC7
)
FEE_TOKEN_NAME = "Ether"
FEE_TOKEN_SYMBOL = "ETH"
FEE_TOKEN_DECIMALS = 18

KAKAROT_ADDRESS_KEY = "kakarot_address"

KAKAROT_CLASS = "kakarot"
CONTRACT_ACCOUNT_CLASS = "contract_account"
EOA_CLASS = "externally_owned_account"
PROXY_CLASS = "proxy"
PRECOMPILES_CLASS = "precompiles"

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

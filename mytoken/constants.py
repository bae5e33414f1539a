"""
MyToken Constants

This module consolidates global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values
from eth_utils import keccak, to_wei

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# LOCAL CHAIN PARAMETERS
# ==================================================================================
DEFAULT_CHAIN_ID = 31337
DEFAULT_ACCOUNT_COUNT = 20
DEFAULT_ACCOUNT_BALANCE = to_wei(10_000, 'ether')
DEFAULT_ACCOUNT_SEED = 'mytoken-local-chain'
ZERO_ADDRESS = '0x' + '00' * 20

MAX_UINT256 = 2 ** 256 - 1


# ==================================================================================
# TOKEN PARAMETERS
# ==================================================================================
TOKEN_NAME = 'MyToken'
TOKEN_SYMBOL = 'MTK'
TOKEN_DECIMALS = 18
ONE_ETHER = to_wei(1, 'ether')
INITIAL_SUPPLY = ONE_ETHER  # minted to the owner on initialize()


# ==================================================================================
# PROXY PARAMETERS
# ==================================================================================
# ERC-1967: bytes32(uint256(keccak256('eip1967.proxy.implementation')) - 1)
IMPLEMENTATION_SLOT = '0x' + (
    int.from_bytes(keccak(text='eip1967.proxy.implementation'), 'big') - 1
).to_bytes(32, 'big').hex()

SUPPORTED_PROXY_KINDS = ('uups',)
DEFAULT_INITIALIZER = 'initialize'


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = dict(LOGGER_DEFAULTS)
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)

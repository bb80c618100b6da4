"""
Analyzer configuration.

Holds the RPC endpoint, per-call timeout, parallelism and the heuristic
constants the metrics and recommendations are tuned against.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# RPC endpoints
DEVNET_RPC = "https://api.devnet.solana.com"
TESTNET_RPC = "https://api.testnet.solana.com"
MAINNET_RPC = "https://api.mainnet-beta.solana.com"

NETWORKS = {
    "devnet": DEVNET_RPC,
    "testnet": TESTNET_RPC,
    "mainnet": MAINNET_RPC,
    "mainnet-beta": MAINNET_RPC,
}

# getSignaturesForAddress sample ceiling per analysis
MAX_TX_LIMIT = 20

DEFAULT_COMPUTE_UNITS_LIMIT = 2_000_000

# Order-of-magnitude I/O estimates, not measurements
READ_BYTES_PER_ACCESS = 100
WRITE_BYTES_PER_ACCESS = 200

# Rent estimate used by the account-size recommendation
RENT_LAMPORTS_PER_BYTE_YEAR = 6_960

LAMPORTS_PER_SOL = 1_000_000_000


def resolve_rpc_url(network_or_url: str) -> str:
    """Map a network name (devnet, testnet, mainnet) to its public RPC URL."""
    return NETWORKS.get(network_or_url.lower(), network_or_url)


@dataclass
class AnalyzerConfig:
    """Configuration for a program analysis."""
    rpc_url: str = DEVNET_RPC
    commitment: str = "confirmed"
    # Number of recent transactions to sample
    tx_limit: int = MAX_TX_LIMIT
    # Seconds allowed for each RPC call
    timeout: float = 30.0
    # Concurrent getTransaction requests
    max_concurrency: int = 4
    compute_units_limit: int = DEFAULT_COMPUTE_UNITS_LIMIT
    read_bytes_per_access: int = READ_BYTES_PER_ACCESS
    write_bytes_per_access: int = WRITE_BYTES_PER_ACCESS
    rent_lamports_per_byte_year: int = RENT_LAMPORTS_PER_BYTE_YEAR

    def __post_init__(self):
        self.rpc_url = resolve_rpc_url(self.rpc_url)
        if not 1 <= self.tx_limit <= MAX_TX_LIMIT:
            raise ValueError(f"tx_limit must be between 1 and {MAX_TX_LIMIT}, got {self.tx_limit}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        for name in (
            "compute_units_limit",
            "read_bytes_per_access",
            "write_bytes_per_access",
            "rent_lamports_per_byte_year",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def from_env(cls, **overrides) -> "AnalyzerConfig":
        """
        Build a config from PROGRAMLENS_* environment variables.

        Explicit keyword overrides win over the environment. A value that
        is not None in overrides is always used.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        values = {}
        env_map = {
            "PROGRAMLENS_RPC_URL": ("rpc_url", str),
            "PROGRAMLENS_TIMEOUT": ("timeout", float),
            "PROGRAMLENS_TX_LIMIT": ("tx_limit", int),
            "PROGRAMLENS_MAX_CONCURRENCY": ("max_concurrency", int),
            "PROGRAMLENS_CU_LIMIT": ("compute_units_limit", int),
        }
        for var, (field_name, cast) in env_map.items():
            raw = os.environ.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = cast(raw.strip())
            except ValueError:
                raise ValueError(f"Invalid value for {var}: {raw!r}") from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def load_env(start: Optional[Path] = None) -> Optional[Path]:
    """
    Load a .env file from the working directory or its parents.

    Variables already present in the environment are left untouched.

    Returns:
        Path of the loaded file, or None if no file was found
    """
    current = start or Path.cwd()
    for _ in range(5):  # Check up to 5 parent dirs
        env_file = current / ".env"
        if env_file.exists():
            with open(env_file) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        os.environ.setdefault(key.strip(), value.strip())
            return env_file
        current = current.parent
    return None

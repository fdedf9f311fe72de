"""SolTrader - Solana token trading core (Jupiter swaps, DexScreener analysis)."""

__version__ = "1.0.0"

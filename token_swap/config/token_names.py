from types import MappingProxyType

DEFAULT_TOKEN_NAMES = MappingProxyType(
    {
        "BLUR": "Blur",
        "bNEO": "Binance NEO",
        "BUSD": "Binance USD",
        "USD": "US Dollar",
        "ETH": "Ethereum",
        "GMX": "GMX",
        "STEVMOS": "Staked Evmos",
        "LUNA": "Terra Luna",
        "RATOM": "Regen Atom",
        "STRD": "Stride",
        "EVMOS": "Evmos",
        "IBCX": "IBC Index",
        "IRIS": "IRISnet",
        "ampLUNA": "Amplified Luna",
        "KUJI": "Kujira",
        "STOSMO": "Staked Osmosis",
        "USDC": "USD Coin",
        "axlUSDC": "Axelar USDC",
        "ATOM": "Cosmos",
        "STATOM": "Staked Atom",
        "OSMO": "Osmosis",
        "rSWTH": "Reward Switcheo",
        "STLUNA": "Staked Luna",
        "LSI": "Liquid Staking Index",
        "OKB": "OKB",
        "OKT": "OKExChain Token",
        "SWTH": "Switcheo",
        "USC": "USC",
        "WBTC": "Wrapped Bitcoin",
        "wstETH": "Wrapped Staked Ether",
        "YieldUSD": "Yield USD",
        "ZIL": "Zilliqa",
        "BTC": "Bitcoin",
        "BNB": "Binance Coin",
        "ADA": "Cardano",
        "DOT": "Polkadot",
        "AVAX": "Avalanche",
        "SOL": "Solana",
    }
)

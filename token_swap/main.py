from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from token_swap.api.routes import router
from token_swap.config.settings import Settings, get_settings
from token_swap.config.token_names import DEFAULT_TOKEN_NAMES
from token_swap.integrations.price_feed import PriceFeedClient
from token_swap.services.balances import DemoBalanceProvider
from token_swap.services.conversion import ConversionSynchronizer
from token_swap.services.price_aggregator import PriceAggregator
from token_swap.services.swap_executor import SimulatedSwapExecutor
from token_swap.services.token_catalog import TokenCatalog


def load_prices(app: FastAPI) -> bool:
    try:
        app.state.token_catalog.refresh()
    except Exception:
        # failure is recorded on the catalog; POST /v1/prices/refresh retries
        return False
    app.state.synchronizer.on_catalog_changed()
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.get_settings().FETCH_PRICES_ON_STARTUP:
        print("[PRICES][startup_fetch] begin", flush=True)
        await run_in_threadpool(load_prices, app)
    yield


def configure_state(app: FastAPI, settings: Settings) -> None:
    catalog = TokenCatalog(
        feed_client=PriceFeedClient(
            url=settings.PRICES_API_URL,
            timeout=settings.PRICES_FETCH_TIMEOUT_SEC,
        ),
        aggregator=PriceAggregator(
            token_names=DEFAULT_TOKEN_NAMES,
            balance_provider=DemoBalanceProvider(seed=settings.DEMO_BALANCE_SEED),
        ),
    )
    synchronizer = ConversionSynchronizer(
        catalog,
        preferred_from=settings.PREFERRED_FROM_SYMBOL,
        preferred_to=settings.PREFERRED_TO_SYMBOL,
    )
    app.state.token_catalog = catalog
    app.state.synchronizer = synchronizer
    app.state.swap_executor = SimulatedSwapExecutor(
        synchronizer,
        delay_sec=settings.SWAP_SIMULATED_DELAY_SEC,
    )


app = FastAPI(title="Token Swap Gateway", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

app.state.get_settings = get_settings
configure_state(app, get_settings())

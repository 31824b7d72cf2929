from fastapi import APIRouter, HTTPException, Request

from token_swap.errors import (
    CatalogNotReadyError,
    FetchError,
    InvalidSlippageError,
    SameTokenSelectionError,
    SwapInProgressError,
    SwapRejectedError,
    UnknownTokenError,
)
from token_swap.schemas.conversion import AmountEdit, SlippageUpdate, SwapReceipt, TokenSelect
from token_swap.services.conversion import build_quote, selectable_tokens

router = APIRouter()


def _run_command(command, *args):
    try:
        return command(*args).model_dump()
    except CatalogNotReadyError as exc:
        raise HTTPException(status_code=409, detail='CATALOG_NOT_READY') from exc
    except SameTokenSelectionError as exc:
        raise HTTPException(status_code=400, detail='SAME_TOKEN_SELECTED') from exc
    except UnknownTokenError as exc:
        raise HTTPException(status_code=404, detail='UNKNOWN_TOKEN') from exc
    except InvalidSlippageError as exc:
        raise HTTPException(status_code=400, detail='INVALID_SLIPPAGE') from exc


@router.get('/tokens')
def list_tokens(request: Request, exclude: str | None = None, search: str = ''):
    catalog = request.app.state.token_catalog
    return [t.model_dump() for t in selectable_tokens(catalog.tokens(), exclude=exclude, search=search)]


@router.get('/prices/status')
def get_price_status(request: Request):
    return request.app.state.token_catalog.status().model_dump()


@router.post('/prices/refresh')
def refresh_prices(request: Request):
    catalog = request.app.state.token_catalog
    try:
        catalog.refresh()
    except FetchError as exc:
        raise HTTPException(status_code=502, detail='PRICE_FEED_UNAVAILABLE') from exc
    request.app.state.synchronizer.on_catalog_changed()
    return catalog.status().model_dump()


@router.get('/conversion')
def get_conversion(request: Request):
    return request.app.state.synchronizer.state.model_dump()


@router.get('/conversion/quote')
def get_conversion_quote(request: Request):
    synchronizer = request.app.state.synchronizer
    quote = build_quote(synchronizer.state, synchronizer.catalog.tokens())
    if quote is None:
        raise HTTPException(status_code=409, detail='TOKENS_NOT_SELECTED')
    return quote.model_dump()


@router.post('/conversion/from-amount')
def edit_from_amount(body: AmountEdit, request: Request):
    return _run_command(request.app.state.synchronizer.on_from_amount_edited, body.amount)


@router.post('/conversion/to-amount')
def edit_to_amount(body: AmountEdit, request: Request):
    return _run_command(request.app.state.synchronizer.on_to_amount_edited, body.amount)


@router.post('/conversion/from-token')
def select_from_token(body: TokenSelect, request: Request):
    return _run_command(request.app.state.synchronizer.on_from_token_selected, body.symbol)


@router.post('/conversion/to-token')
def select_to_token(body: TokenSelect, request: Request):
    return _run_command(request.app.state.synchronizer.on_to_token_selected, body.symbol)


@router.post('/conversion/flip')
def flip_tokens(request: Request):
    return _run_command(request.app.state.synchronizer.swap_sides)


@router.post('/conversion/max')
def use_max_amount(request: Request):
    return _run_command(request.app.state.synchronizer.set_max_amount)


@router.post('/conversion/slippage')
def update_slippage(body: SlippageUpdate, request: Request):
    return _run_command(request.app.state.synchronizer.set_slippage, body.slippage_pct)


@router.get('/exchange-rate')
def get_exchange_rate(from_symbol: str, to_symbol: str, request: Request):
    rate = request.app.state.synchronizer.exchange_rate(from_symbol, to_symbol)
    return {'from_symbol': from_symbol, 'to_symbol': to_symbol, 'rate': rate}


@router.post('/swaps', response_model=SwapReceipt)
def submit_swap(request: Request):
    executor = request.app.state.swap_executor
    try:
        return executor.submit()
    except SwapRejectedError as exc:
        raise HTTPException(status_code=400, detail='MISSING_FIELDS') from exc
    except SwapInProgressError as exc:
        raise HTTPException(status_code=409, detail='SWAP_IN_PROGRESS') from exc


@router.get('/metrics/prices')
def price_metrics(request: Request):
    metrics = request.app.state.token_catalog.metrics()
    metrics.update(request.app.state.swap_executor.metrics())
    return metrics

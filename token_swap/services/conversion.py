from __future__ import annotations

import math
import threading
from typing import Mapping

from token_swap.errors import (
    CatalogNotReadyError,
    InvalidSlippageError,
    SameTokenSelectionError,
    UnknownTokenError,
)
from token_swap.schemas.conversion import ConversionQuote, ConversionState, EditedField
from token_swap.schemas.token import PricedToken
from token_swap.services.token_catalog import TokenCatalog

AMOUNT_DECIMALS = 6
SLIPPAGE_OPTIONS = (0.1, 0.5, 1.0)
NETWORK_FEE_TEXT = "~$2.50"


def parse_amount(text: str | None) -> float | None:
    """Return the amount as a finite, non-negative float or None."""
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None
    try:
        amount = float(value)
    except ValueError:
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def format_amount(value: float) -> str:
    return f"{value:.{AMOUNT_DECIMALS}f}"


def _derive(amount: float | None, rate: float) -> str:
    if amount is None:
        return ""
    value = amount * rate
    if not math.isfinite(value):
        return ""
    return format_amount(value)


def exchange_rate(from_token: PricedToken | None, to_token: PricedToken | None) -> float:
    """Units of `to_token` per one `from_token`; 1.0 when either price is missing."""
    if from_token is None or to_token is None:
        return 1.0
    if not from_token.price or not to_token.price:
        return 1.0
    return from_token.price / to_token.price


def _token_or_unpriced(catalog: Mapping[str, PricedToken], symbol: str) -> PricedToken:
    token = catalog.get(symbol)
    if token is None:
        return PricedToken(symbol=symbol, name=symbol, price=None)
    return token


def recompute(state: ConversionState, catalog: Mapping[str, PricedToken]) -> ConversionState:
    """Derive the non-edited amount from the edited one.

    Pure: returns a new state and never touches the edited field or the
    edited marker.
    """
    if state.from_symbol is None or state.to_symbol is None:
        return state

    from_token = _token_or_unpriced(catalog, state.from_symbol)
    to_token = _token_or_unpriced(catalog, state.to_symbol)

    if state.edited_field is EditedField.FROM:
        amount = parse_amount(state.from_amount)
        return state.model_copy(update={"to_amount": _derive(amount, exchange_rate(from_token, to_token))})

    amount = parse_amount(state.to_amount)
    return state.model_copy(update={"from_amount": _derive(amount, exchange_rate(to_token, from_token))})


def selectable_tokens(
    catalog: Mapping[str, PricedToken],
    exclude: str | None = None,
    search: str = "",
) -> list[PricedToken]:
    term = search.strip().lower()
    out: list[PricedToken] = []
    for token in catalog.values():
        if token.symbol == exclude:
            continue
        if term and term not in token.symbol.lower() and term not in token.name.lower():
            continue
        out.append(token)
    return out


def _usd_value(amount_text: str, token: PricedToken) -> str | None:
    amount = parse_amount(amount_text)
    if amount is None:
        return None
    value = amount * (token.price or 0.0)
    if not math.isfinite(value):
        return None
    return f"{value:.2f}"


def _price_text(token: PricedToken) -> str:
    if token.price is None:
        return "N/A"
    return f"${token.price:.2f}"


def build_quote(state: ConversionState, catalog: Mapping[str, PricedToken]) -> ConversionQuote | None:
    if state.from_symbol is None or state.to_symbol is None:
        return None
    from_token = _token_or_unpriced(catalog, state.from_symbol)
    to_token = _token_or_unpriced(catalog, state.to_symbol)
    rate = exchange_rate(from_token, to_token)
    return ConversionQuote(
        from_symbol=from_token.symbol,
        to_symbol=to_token.symbol,
        rate=rate,
        rate_text=f"1 {from_token.symbol} = {format_amount(rate)} {to_token.symbol}",
        from_price_text=_price_text(from_token),
        to_price_text=_price_text(to_token),
        from_usd_value=_usd_value(state.from_amount, from_token),
        to_usd_value=_usd_value(state.to_amount, to_token),
        network_fee_text=NETWORK_FEE_TEXT,
        slippage_pct=state.slippage_pct,
    )


def _form_fields(state: ConversionState) -> tuple:
    return (state.from_symbol, state.to_symbol, state.from_amount, state.to_amount)


class ConversionSynchronizer:
    """Keeps fromAmount/toAmount consistent with the user's last edit.

    Every mutator stages its input and ends with a single `recompute`, so the
    field the user just typed into is never overwritten by the same transition.
    """

    def __init__(
        self,
        catalog: TokenCatalog,
        *,
        preferred_from: str = "ETH",
        preferred_to: str = "USDC",
    ) -> None:
        self.catalog = catalog
        self.preferred_from = preferred_from
        self.preferred_to = preferred_to
        self._lock = threading.Lock()
        self._state = ConversionState()

    @property
    def state(self) -> ConversionState:
        with self._lock:
            return self._state.model_copy()

    def _require_catalog(self) -> None:
        # inputs are inert until the first load and while a refresh is in flight
        if not self.catalog.loaded or self.catalog.state == "LOADING":
            raise CatalogNotReadyError("CATALOG_NOT_READY")

    def _commit(self, staged: ConversionState) -> ConversionState:
        self._state = recompute(staged, self.catalog.tokens())
        return self._state.model_copy()

    def _warn_missing_price(self) -> None:
        if self._state.from_symbol is None or self._state.to_symbol is None:
            return
        from_token = self.catalog.get(self._state.from_symbol)
        to_token = self.catalog.get(self._state.to_symbol)
        if from_token is None or to_token is None or not from_token.price or not to_token.price:
            print(
                "[CONVERSION][missing_price] "
                f"from={self._state.from_symbol} to={self._state.to_symbol} rate_fallback=1",
                flush=True,
            )

    def exchange_rate(self, from_symbol: str, to_symbol: str) -> float:
        tokens = self.catalog.tokens()
        return exchange_rate(
            _token_or_unpriced(tokens, from_symbol),
            _token_or_unpriced(tokens, to_symbol),
        )

    def on_from_amount_edited(self, amount: str) -> ConversionState:
        self._require_catalog()
        with self._lock:
            return self._commit(
                self._state.model_copy(update={"from_amount": amount, "edited_field": EditedField.FROM})
            )

    def on_to_amount_edited(self, amount: str) -> ConversionState:
        self._require_catalog()
        with self._lock:
            return self._commit(
                self._state.model_copy(update={"to_amount": amount, "edited_field": EditedField.TO})
            )

    def _select(self, side: EditedField, symbol: str) -> ConversionState:
        self._require_catalog()
        if self.catalog.get(symbol) is None:
            raise UnknownTokenError(symbol)
        with self._lock:
            other = self._state.to_symbol if side is EditedField.FROM else self._state.from_symbol
            if symbol == other:
                raise SameTokenSelectionError(symbol)
            key = "from_symbol" if side is EditedField.FROM else "to_symbol"
            state = self._commit(self._state.model_copy(update={key: symbol}))
            self._warn_missing_price()
            return state

    def on_from_token_selected(self, symbol: str) -> ConversionState:
        return self._select(EditedField.FROM, symbol)

    def on_to_token_selected(self, symbol: str) -> ConversionState:
        return self._select(EditedField.TO, symbol)

    def swap_sides(self) -> ConversionState:
        """Flip tokens and amounts in one transition, without recomputing."""
        self._require_catalog()
        with self._lock:
            current = self._state
            edited = EditedField.TO if current.edited_field is EditedField.FROM else EditedField.FROM
            self._state = current.model_copy(
                update={
                    "from_symbol": current.to_symbol,
                    "to_symbol": current.from_symbol,
                    "from_amount": current.to_amount,
                    "to_amount": current.from_amount,
                    "edited_field": edited,
                }
            )
            return self._state.model_copy()

    def set_max_amount(self) -> ConversionState:
        self._require_catalog()
        with self._lock:
            token = self.catalog.get(self._state.from_symbol)
            if token is None or not token.balance:
                return self._state.model_copy()
            return self._commit(
                self._state.model_copy(
                    update={"from_amount": str(token.balance), "edited_field": EditedField.FROM}
                )
            )

    def set_slippage(self, slippage_pct: float) -> ConversionState:
        if slippage_pct not in SLIPPAGE_OPTIONS:
            raise InvalidSlippageError(str(slippage_pct))
        with self._lock:
            self._state = self._state.model_copy(update={"slippage_pct": slippage_pct})
            return self._state.model_copy()

    def clear_amounts(self, expected: ConversionState | None = None) -> ConversionState:
        """Clear both amounts; with `expected`, only if the form still shows it."""
        with self._lock:
            if expected is not None and _form_fields(self._state) != _form_fields(expected):
                return self._state.model_copy()
            return self._commit(self._state.model_copy(update={"from_amount": "", "to_amount": ""}))

    def _pick_default(self, tokens: Mapping[str, PricedToken], preferred: str, taken: str | None) -> str | None:
        if preferred in tokens and preferred != taken:
            return preferred
        for symbol in tokens:
            if symbol != taken:
                return symbol
        return None

    def apply_defaults(self) -> ConversionState:
        tokens = self.catalog.tokens()
        with self._lock:
            staged = self._state
            if staged.from_symbol is None and tokens:
                staged = staged.model_copy(
                    update={"from_symbol": self._pick_default(tokens, self.preferred_from, staged.to_symbol)}
                )
            if staged.to_symbol is None and len(tokens) > 1:
                staged = staged.model_copy(
                    update={"to_symbol": self._pick_default(tokens, self.preferred_to, staged.from_symbol)}
                )
            return self._commit(staged)

    def on_catalog_changed(self) -> ConversionState:
        """Apply defaults to unset sides and recompute against the new prices."""
        state = self.apply_defaults()
        with self._lock:
            self._warn_missing_price()
        return state

    def reset(self) -> None:
        with self._lock:
            self._state = ConversionState()

from __future__ import annotations

import threading
import time
from typing import Callable

from token_swap.errors import SwapInProgressError, SwapRejectedError
from token_swap.schemas.conversion import SwapReceipt
from token_swap.services.conversion import ConversionSynchronizer


class SimulatedSwapExecutor:
    """Stand-in for an execution backend: waits, reports and clears the form."""

    def __init__(
        self,
        synchronizer: ConversionSynchronizer,
        *,
        delay_sec: float = 2.0,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.synchronizer = synchronizer
        self.delay_sec = delay_sec
        self.sleep = sleep or time.sleep
        self._busy_lock = threading.Lock()
        self.busy = False
        self.executed = 0
        self.rejected = 0

    def submit(self) -> SwapReceipt:
        state = self.synchronizer.state
        if not state.from_symbol or not state.to_symbol or not state.from_amount:
            with self._busy_lock:
                self.rejected += 1
            raise SwapRejectedError("MISSING_FIELDS")

        with self._busy_lock:
            if self.busy:
                raise SwapInProgressError("SWAP_IN_PROGRESS")
            self.busy = True

        try:
            self.sleep(self.delay_sec)
            receipt = SwapReceipt(
                from_symbol=state.from_symbol,
                to_symbol=state.to_symbol,
                from_amount=state.from_amount,
                to_amount=state.to_amount,
                slippage_pct=state.slippage_pct,
                executed_at=int(time.time()),
            )
            with self._busy_lock:
                self.executed += 1
            print(
                "[SWAP][executed] "
                f"from={receipt.from_amount} {receipt.from_symbol} "
                f"to={receipt.to_amount} {receipt.to_symbol} slippage_pct={receipt.slippage_pct}",
                flush=True,
            )
            self.synchronizer.clear_amounts(expected=state)
            return receipt
        finally:
            with self._busy_lock:
                self.busy = False

    def metrics(self) -> dict[str, int | bool]:
        return {
            "swap_busy": self.busy,
            "swaps_executed": self.executed,
            "swaps_rejected": self.rejected,
        }

"""utils/shared.py - Timing instrumentation, mask sampling and run reports.

Anything carrying ``timings`` / ``call_counts`` dicts, a ``device`` and an
``enable_timing`` flag (``Board``, ``GameState``) can have its methods
wrapped with :func:`timed_method` and summarised with
:func:`print_timing_report`.
"""

from __future__ import annotations
import time
from functools import wraps
from typing import Callable, Dict, List, Optional

import torch
from torch import Tensor

# ========================= SAMPLING =========================

def sample_from_mask(mask: Tensor, generator: Optional[torch.Generator] = None) -> Tensor:
    """One uniformly drawn True index per row of a (R, N) bool mask.

    Every row needs at least one True entry.
    """
    weights = mask.to(torch.float64)
    return torch.multinomial(weights, num_samples=1, generator=generator).squeeze(1)

# ========================= TIMING =========================

def _synchronize(device: Optional[torch.device]) -> None:
    if device is None:
        return
    if device.type == "cuda":
        torch.cuda.synchronize(device)
    elif device.type == "mps":
        torch.mps.synchronize()


class TimingContext:
    """Append the wall time of a block to ``timings[name]``.

    Pending accelerator work is flushed on entry and exit so the figure
    covers the kernels launched inside the block.
    """

    def __init__(self, timings: Dict[str, List[float]], name: str,
                 device: Optional[torch.device] = None):
        self.timings = timings
        self.name = name
        self.device = device
        self.start = 0.0

    def __enter__(self):
        _synchronize(self.device)
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _synchronize(self.device)
        self.timings[self.name].append(time.perf_counter() - self.start)


def timed_method(method: Callable) -> Callable:
    """Record call count and duration of ``method`` when the owner has timing on."""
    name = method.__name__

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        if not getattr(self, "enable_timing", False):
            return method(self, *args, **kwargs)
        self.call_counts[name] += 1
        with TimingContext(self.timings, name, getattr(self, "device", None)):
            return method(self, *args, **kwargs)

    return wrapper

# ========================= REPORTS =========================

def print_section_header(title: str, width: int = 72) -> None:
    print("\n" + "=" * width)
    print(title)
    print("=" * width)


def print_timing_report(obj, top_n: int = 20) -> None:
    """Per-method totals for ``obj``, slowest first."""
    timings = getattr(obj, "timings", None) or {}
    rows = []
    for name, values in timings.items():
        if values:
            t = torch.tensor(values, dtype=torch.float64)
            rows.append((name, t.numel(), float(t.sum()), float(t.mean()), float(t.max())))
    if not rows:
        return

    rows.sort(key=lambda r: r[2], reverse=True)
    grand = sum(r[2] for r in rows)
    print_section_header(f"TIMING: {type(obj).__name__}")
    print(f"{'method':<28} {'calls':>7} {'total ms':>10} {'mean ms':>9} {'max ms':>9} {'share':>7}")
    print("-" * 72)
    for name, calls, total, mean, peak in rows[:top_n]:
        share = 100.0 * total / grand if grand > 0 else 0.0
        print(f"{name:<28} {calls:>7} {total*1e3:>10.2f} {mean*1e3:>9.3f} "
              f"{peak*1e3:>9.3f} {share:>6.1f}%")


def print_performance_metrics(elapsed: float, moves_made: int, moves_rejected: int) -> None:
    """Summary line block for a self-play run."""
    print_section_header("SELF-PLAY")
    attempts = moves_made + moves_rejected
    print(f"wall time        {elapsed:.2f} s")
    print(f"accepted moves   {moves_made}")
    print(f"rejected tries   {moves_rejected}"
          + (f"  ({100.0 * moves_rejected / attempts:.1f}% of attempts)" if attempts else ""))
    if moves_made and elapsed > 0:
        print(f"throughput       {moves_made / elapsed:.1f} moves/s, "
              f"{elapsed / moves_made * 1e3:.2f} ms/move")

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from matplotlib.ticker import LogLocator
import numpy as np


DEFAULT_TICK_COUNT = 5


def generate_nice_ticks(vmin: float, vmax: float, target: int = DEFAULT_TICK_COUNT) -> np.ndarray:
    """Round-number ticks that fall inside [vmin, vmax]."""
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin > vmax:
        vmin, vmax = vmax, vmin
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.ceil(vmin / step) * step
    tick_max = np.floor(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Snap floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks[(ticks >= vmin - step * 1e-9) & (ticks <= vmax + step * 1e-9)]


def generate_log_ticks(vmin: float, vmax: float) -> np.ndarray:
    if vmin <= 0 or vmax <= 0:
        raise ValueError("log ticks need a positive range")
    if vmin > vmax:
        vmin, vmax = vmax, vmin
    ticks = np.asarray(LogLocator(base=10.0).tick_values(vmin, vmax), dtype=np.float64)
    inside = ticks[(ticks >= vmin) & (ticks <= vmax)]
    if inside.size < 2:
        # Less than a decade: fall back to linear steps inside the range.
        return generate_nice_ticks(vmin, vmax)
    return inside


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.2e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim fractional zeros; integer labels like 30 keep theirs.
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray, *, log: bool = False) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    if log:
        return [format_tick(float(v), step=float(v) if v < 1 else None) for v in ticks]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)

"""Chart rendering for a single entity's history."""

from collections.abc import Iterable, Sequence
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # headless for cron/CI
import matplotlib.pyplot as plt  # noqa: E402
import matplotlib.ticker as ticker  # noqa: E402

from pullhistory.core.models import ReleaseMarker, Sample  # noqa: E402

COUNT_COLOR = "blue"
DELTA_COLOR = "orange"
MARKER_COLOR = "gray"


def markers_in_range(
    markers: Iterable[ReleaseMarker], series: Sequence[Sample]
) -> list[ReleaseMarker]:
    """Return the markers falling within the series' date range, by date."""
    if not series:
        return []
    first = min(s.day for s in series)
    last = max(s.day for s in series)
    return sorted(
        (m for m in markers if first <= m.day <= last), key=lambda m: m.day
    )


def render_chart(
    name: str,
    series: Sequence[Sample],
    out_path: Path,
    markers: Iterable[ReleaseMarker] = (),
) -> Path:
    """Render pull counts and deltas of one entity to an image file.

    Counts use the left axis, deltas a secondary right axis. Release markers
    inside the series range are drawn as labelled vertical lines.

    Raises:
        ValueError: If the series is empty.
    """
    if not series:
        raise ValueError(f"No samples to plot for '{name}'")

    days = [s.day for s in series]
    fig, ax = plt.subplots(figsize=(12, 5))
    try:
        ax.plot(days, [s.count for s in series], color=COUNT_COLOR, lw=2, label="# pulls")
        ax.set_title(name)
        ax.set_ylabel("# pulls")
        ax.yaxis.set_major_formatter(ticker.StrMethodFormatter("{x:,.0f}"))
        ax.grid(True, axis="y", color="lightgrey", linestyle="--", linewidth=1)
        ax.set_axisbelow(True)

        delta_ax = ax.twinx()
        delta_ax.plot(
            days, [s.delta for s in series], color=DELTA_COLOR, lw=1, label="delta"
        )
        delta_ax.set_ylabel("delta")

        for marker in markers_in_range(markers, series):
            ax.axvline(marker.day, color=MARKER_COLOR, linestyle="--", linewidth=1)
            ax.annotate(
                marker.label,
                xy=(marker.day, 1.0),
                xycoords=("data", "axes fraction"),
                rotation=90,
                va="top",
                ha="right",
                fontsize=8,
                color=MARKER_COLOR,
            )

        handles = ax.get_legend_handles_labels()
        delta_handles = delta_ax.get_legend_handles_labels()
        ax.legend(handles[0] + delta_handles[0], handles[1] + delta_handles[1], loc="upper left")
        fig.autofmt_xdate()
        fig.tight_layout()

        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path, dpi=100)
    finally:
        plt.close(fig)
    return out_path

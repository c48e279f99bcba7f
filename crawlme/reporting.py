"""Output reporting helpers."""
from __future__ import annotations

import csv
import io
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from .models import CrawlState, Venue

STOP_FIELDNAMES = [
    "stop",
    "name",
    "address",
    "rating",
    "rating_count",
    "lat",
    "lng",
]


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def stop_rows(stops: Iterable[Venue]) -> List[Dict[str, Any]]:
    rows = []
    for i, venue in enumerate(stops, start=1):
        coord = venue.coordinate
        rows.append(
            {
                "stop": i,
                "name": venue.name or "",
                "address": venue.address or "",
                "rating": venue.rating if venue.rating is not None else "",
                "rating_count": venue.rating_count if venue.rating_count is not None else "",
                "lat": coord.lat if coord else "",
                "lng": coord.lng if coord else "",
            }
        )
    return rows


def _write_stops(f: TextIO, stops: Iterable[Venue]) -> None:
    writer = csv.DictWriter(f, fieldnames=STOP_FIELDNAMES)
    writer.writeheader()
    for row in stop_rows(stops):
        writer.writerow(row)


def render_stops_csv(stops: Iterable[Venue]) -> str:
    buf = io.StringIO(newline="")
    _write_stops(buf, stops)
    return buf.getvalue()


def write_stops_csv(path: str, stops: Iterable[Venue]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
        _write_stops(f, stops)


def crawl_snapshot(state: CrawlState) -> Dict[str, Any]:
    summary = state.summary
    return {
        "generated_at": utc_now_iso(),
        "status": state.status.value,
        "params": {
            "food_type": state.params.food_type,
            "radius_miles": state.params.radius_miles,
            "stop_count": state.params.stop_count,
            "min_rating": state.params.min_rating,
        },
        "center": {"lat": state.center.lat, "lng": state.center.lng} if state.center else None,
        "optimize": state.options.optimize,
        "summary": (
            {
                "distance_miles": summary.distance_miles,
                "duration_minutes": summary.duration_minutes,
            }
            if summary
            else None
        ),
        "stops": [{"id": v.id, **row} for v, row in zip(state.stops, stop_rows(state.stops))],
    }


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def write_crawl_json(path: str, state: CrawlState) -> None:
    write_json_object(path, crawl_snapshot(state))

import logging

from datetime import datetime, timezone


def rel_time_iso(ts: datetime | None) -> str:
    if ts is None:
        ts = datetime.now(timezone.utc)
    return ts.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )

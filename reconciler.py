"""
POSITION RECONCILER
-------------------
Moves bodies to the positions reported by the ephemeris service and keeps
each orbit ring lined up with its body.

For one body:
1.  Pull the first RA/Dec row out of the report (`ephemeris.extract_ra_dec`).
2.  Convert it to (x, y, z) at the body's catalog distance.
3.  Throw the result away if the conversion failed or anything is NaN.
4.  Otherwise replace the body's position in one assignment.
5.  Spin the orbit ring to atan2(y, x) about Z and pin its center to the origin.

Any failure leaves the body exactly where it was. There is no retry; the next
refresh (date change or the 24h timer) simply tries again.
"""
import logging
from datetime import date, datetime, timedelta, timezone

from api_client import EphemerisFetchError, fetch_ephemeris
from config import REFRESH_INTERVAL_HOURS
from ephemeris import NoEphemerisData, extract_ra_dec
from physics import ORIGIN, convert_string_to_cartesian, is_valid_point, orbit_angle

logger = logging.getLogger(__name__)


def apply_position(body, point):
    """Stores a validated point on the body and realigns its orbit ring."""
    body.position = point.copy()
    body.positioned = True

    orbit = body.ensure_orbit()
    orbit.rotation = orbit_angle(body.position)
    orbit.center = ORIGIN.copy()


def reconcile_body(body, raw_text):
    """
    Applies one ephemeris report to one body.

    Returns:
        bool: True if the body moved, False if the report was unusable.
    """
    try:
        sample = extract_ra_dec(raw_text)
    except NoEphemerisData as e:
        logger.warning(f"No position data found for {body.name}: {e.reason}")
        return False

    logger.info(f"Position for {body.name}: RA={sample.ra}, Dec={sample.dec}")
    conversion = convert_string_to_cartesian(sample.ra, sample.dec, body.distance)

    if not conversion.ok or not is_valid_point(conversion.point):
        x, y, z = conversion.point
        logger.error(f"Invalid coordinates for {body.name}: x={x}, y={y}, z={z}")
        return False

    apply_position(body, conversion.point)
    x, y, z = body.position
    logger.info(f"Updated coordinates for {body.name}: x={x:.2f}, y={y:.2f}, z={z:.2f}")
    return True


def refresh_body(body, ephemeris_date, fetch=fetch_ephemeris):
    """Fetches and applies the report for a single body. Fetch failures are logged, not raised."""
    try:
        raw_text = fetch(body.command, ephemeris_date)
    except EphemerisFetchError as e:
        logger.error(f"Error fetching data for {body.name}: {e}")
        return False
    return reconcile_body(body, raw_text)


def refresh_all(state, ephemeris_date=None, fetch=fetch_ephemeris):
    """
    Refreshes every body, one after the other.

    Bodies are fetched sequentially to keep the load on the service low. A failure
    for one body (including an unexpected exception) is logged and the loop moves on
    to the next one.

    Args:
        state (SimulationState): Bodies to update. `state.last_refresh` is stamped at the end.
        ephemeris_date (date): Day to query. Defaults to `state.ephemeris_date`.
        fetch (callable): `fetch(command, date) -> str`, swapped out in tests.

    Returns:
        int: Number of bodies whose position was updated.
    """
    if ephemeris_date is None:
        ephemeris_date = state.ephemeris_date
    else:
        state.ephemeris_date = ephemeris_date

    logger.info(f"Refreshing {len(state.bodies)} bodies for {ephemeris_date}")
    state.begin_refresh()
    updated = 0
    try:
        for body in state.bodies:
            try:
                if refresh_body(body, ephemeris_date, fetch=fetch):
                    updated += 1
            except Exception:
                logger.exception(f"Unexpected error refreshing {body.name}")
    finally:
        state.end_refresh()
        state.last_refresh = datetime.now(timezone.utc)

    logger.info(f"Refresh complete: {updated}/{len(state.bodies)} bodies updated")
    return updated


class RefreshSchedule:
    """Tells the main loop when the recurring wall-clock refresh is due."""

    def __init__(self, interval=timedelta(hours=REFRESH_INTERVAL_HOURS)):
        self.interval = interval
        self.last_run = None

    def due(self, now=None):
        if now is None:
            now = datetime.now(timezone.utc)
        if self.last_run is None:
            return True
        return now - self.last_run >= self.interval

    def mark(self, now=None):
        self.last_run = now if now is not None else datetime.now(timezone.utc)


def parse_date(text):
    """Reads the YYYY-MM-DD date typed into the date box. Raises ValueError if it is not one."""
    return date.fromisoformat(text.strip())


def request_date_change(state, text):
    """
    Handles a date typed by the user.

    Returns the parsed date and pins it on the state, or None if the text is not a
    YYYY-MM-DD date, in which case `state.notice` tells the user why.
    """
    try:
        new_date = parse_date(text)
    except ValueError:
        logger.warning(f"Not a date: {text!r}")
        state.notice = f"Invalid date '{text.strip()}', expected YYYY-MM-DD"
        return None

    logger.info(f"Date changed to {new_date.isoformat()}")
    state.notice = ""
    state.date_pinned = True
    return new_date

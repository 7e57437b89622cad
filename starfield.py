import csv
import logging
import os
import sys

from api_client import EphemerisFetchError, fetch_object_catalog
from config import DEEP_SKY_CSV
from physics import convert_degrees_to_cartesian, is_valid_point
from simulation import DeepSkyObject

logger = logging.getLogger(__name__)


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    try:
        # PyInstaller creates a temp folder and stores path in _MEIPASS
        base_path = sys._MEIPASS
    except AttributeError:
        base_path = os.path.abspath(".")

    return os.path.join(base_path, relative_path)


def _to_float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Starfield:
    """
    Deep-sky objects (stars, clusters, galaxies...) placed around the system.

    Unlike the planets these come with RA and Dec already in decimal degrees, so they
    go through `convert_degrees_to_cartesian` directly.
    """
    def __init__(self, data_file=None):
        self.objects = []
        if data_file:
            self.load_csv(resource_path(data_file))

    def _add(self, name, ra_deg, dec_deg, distance, diameter):
        ra = _to_float(ra_deg)
        dec = _to_float(dec_deg)
        dist = _to_float(distance)
        if ra is None or dec is None or dist is None:
            logger.debug(f"Skipping deep-sky object {name}: RA={ra_deg}, Dec={dec_deg}, Distance={distance}")
            return None

        position = convert_degrees_to_cartesian(ra, dec, dist)
        if not is_valid_point(position):
            logger.warning(f"Invalid position for {name}: {position}")
            return None

        diam = _to_float(diameter)
        obj = DeepSkyObject(
            name=str(name).strip(),
            ra_deg=ra,
            dec_deg=dec,
            distance=dist,
            diameter=diam if diam is not None else 0.0,
            position=position,
        )
        self.objects.append(obj)
        return obj

    def load_rows(self, rows):
        """
        Loads the rows served by the object-data endpoint.

        Columns: 0 name, 2 RA (deg), 3 distance, 5 Dec (deg), 8 diameter.
        Rows that are too short or not numeric are skipped.
        """
        self.objects = []
        for row in rows:
            if not isinstance(row, (list, tuple)) or len(row) < 6:
                continue
            diameter = row[8] if len(row) > 8 else None
            self._add(row[0], row[2], row[5], row[3], diameter)
        logger.info(f"Loaded {len(self.objects)} deep-sky objects.")
        return self.objects

    def load_csv(self, filename):
        """
        Loads deep-sky objects from a CSV file: name, ra_deg, dec_deg, distance[, diameter].
        A header row is skipped if present.
        """
        self.objects = []

        if not filename:
            return self.objects

        if not os.path.exists(filename):
            logger.error(f"Deep-sky data file '{filename}' not found.")
            return self.objects

        try:
            with open(filename, mode='r', encoding='utf-8-sig') as f:
                reader = csv.reader(f)
                for row in reader:
                    if len(row) < 4:
                        continue
                    name = row[0].strip()
                    if name.lower() in ("name", "object"):
                        continue
                    diameter = row[4] if len(row) > 4 else None
                    self._add(name, row[1], row[2], row[3], diameter)
        except (OSError, csv.Error) as e:
            logger.error(f"Error loading deep-sky data: {e}")

        logger.info(f"Loaded {len(self.objects)} deep-sky objects from {filename}.")
        return self.objects


def load_deep_sky_objects(fetch_rows=fetch_object_catalog, fallback_file=DEEP_SKY_CSV):
    """
    Builds the deep-sky field from the object-data endpoint.

    If the endpoint cannot be reached the bundled CSV (`DEEP_SKY_CSV`, resolved with
    `resource_path` so it also works from a PyInstaller build) is loaded instead.

    Returns:
        Starfield: the loaded field, possibly empty.
    """
    try:
        rows = fetch_rows()
    except EphemerisFetchError as e:
        logger.warning(f"Deep-sky objects not fetched, falling back to {fallback_file}: {e}")
        return Starfield(fallback_file)

    starfield = Starfield()
    starfield.load_rows(rows)
    return starfield

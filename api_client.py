import logging

import requests

from config import EPHEMERIS_BASE_URL, EPHEMERIS_PATH, OBJECT_DATA_PATH, REQUEST_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)

# User-Agent so the service can tell the orrery apart from a browser
HEADERS = {'User-Agent': USER_AGENT}


class EphemerisFetchError(Exception):
    """A request to the ephemeris service failed or returned something unusable."""


def _get_json(url, params=None):
    try:
        response = requests.get(url, params=params, headers=HEADERS, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.HTTPError as e:
        raise EphemerisFetchError(f"HTTP Error during API request: {e}") from e
    except requests.exceptions.ConnectionError as e:
        raise EphemerisFetchError(f"Connection Error: Could not connect to {url}. Details: {e}") from e
    except requests.exceptions.Timeout as e:
        raise EphemerisFetchError(f"Timeout Error: The request timed out. Details: {e}") from e
    except requests.exceptions.RequestException as e:
        raise EphemerisFetchError(f"Request failed: {e}") from e
    except ValueError as e:
        # requests raises a ValueError subclass when the body is not JSON
        raise EphemerisFetchError(f"Response from {url} is not JSON: {e}") from e


def fetch_ephemeris(command, date, base_url=EPHEMERIS_BASE_URL):
    """
    Fetches the raw ephemeris report for one body.

    The service is queried as `GET {base_url}/planet-data?command=<id>&date=<YYYY-MM-DD>`
    and answers `{"result": "<multi-line text>"}`. The text is returned untouched; reading
    RA/Dec out of it is the job of `ephemeris.extract_ra_dec`.

    Args:
        command (str): Catalog identifier of the body, e.g. "399" for Earth.
        date (datetime.date | str): Day to query. Dates are sent as ISO YYYY-MM-DD.
        base_url (str): Service root.

    Returns:
        str: The `result` text block.

    Raises:
        EphemerisFetchError: non-2xx status, network trouble, non-JSON body or a missing `result`.
    """
    date_str = date.isoformat() if hasattr(date, 'isoformat') else str(date)
    url = base_url.rstrip('/') + EPHEMERIS_PATH
    params = {'command': command, 'date': date_str}
    logger.debug(f"GET {url} {params}")

    data = _get_json(url, params=params)
    if not isinstance(data, dict) or not data.get('result'):
        raise EphemerisFetchError(f"Invalid response format for command {command}: no 'result' field")
    return data['result']


def fetch_object_catalog(base_url=EPHEMERIS_BASE_URL):
    """
    Fetches the deep-sky object table served next to the ephemeris endpoint.

    Each row is a list; the columns used are
    0 name, 2 RA (degrees), 3 distance, 5 Dec (degrees), 8 diameter.

    Returns:
        list: The raw rows.

    Raises:
        EphemerisFetchError: on any request failure or if the body is not a list.
    """
    url = base_url.rstrip('/') + OBJECT_DATA_PATH
    data = _get_json(url)
    if not isinstance(data, list):
        raise EphemerisFetchError(f"Object data from {url} is not a list")
    logger.info(f"Fetched {len(data)} deep-sky object rows.")
    return data

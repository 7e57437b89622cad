"""
EPHEMERIS TEXT SCANNER
----------------------
The ephemeris service answers with a plain text report. Everything above the
`$$SOE` (start of ephemeris) marker is header, everything after `$$EOE` (end of
ephemeris) is footer, and the rows in between are the data table:

    $$SOE
     2024-Jan-01 00:00     10 20 30.00 +05 00 00.0
     2024-Jan-02 00:00  *  10 24 11.07 +04 36 41.2
    $$EOE

Each row is whitespace separated. Once the timestamp is collapsed into a single
token, tokens 1-3 are the RA (hours, minutes, seconds) and token 4 is the Dec
degrees. Only the first usable row is ever read.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

START_MARKER = "$$SOE"
END_MARKER = "$$EOE"
MIN_ROW_TOKENS = 5

# "00:00", "13:45:10", "13:45:10.500"
_CLOCK_TIME = re.compile(r"^\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?$")
# Solar / lunar presence flags printed between the time and the RA column
_PRESENCE_FLAG = re.compile(r"^[*A-Za-z]{1,2}$")


class ScanState(Enum):
    BEFORE_DATA = "before_data"
    IN_DATA = "in_data"
    DONE = "done"


class NoEphemerisData(ValueError):
    """The text had no usable data row between the markers."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class RaDecSample:
    ra: str
    dec: str
    timestamp: str = ""


@dataclass
class ScanResult:
    state: ScanState
    sample: Optional[RaDecSample] = None
    saw_start: bool = False
    data_rows: int = 0

    @property
    def found(self):
        return self.sample is not None


def normalize_row(line):
    """
    Tokenizes one data row and folds the timestamp into token 0.

    Horizons style rows print the date and the time of day as separate tokens,
    sometimes followed by one or two presence flags. Those are merged / dropped
    so that the RA always starts at token 1.
    """
    tokens = line.split()
    if len(tokens) > 1 and _CLOCK_TIME.match(tokens[1]):
        tokens = [f"{tokens[0]} {tokens[1]}"] + tokens[2:]
    while len(tokens) > 1 and _PRESENCE_FLAG.match(tokens[1]):
        del tokens[1]
    return tokens


def parse_row(line):
    """Returns the RaDecSample of a data row, or None when the row is too short."""
    tokens = normalize_row(line)
    if len(tokens) < MIN_ROW_TOKENS:
        return None
    ra = " ".join(tokens[1:4])
    dec = tokens[4]
    return RaDecSample(ra=ra, dec=dec, timestamp=tokens[0])


def scan_ephemeris(text):
    """
    Runs the marker state machine over the raw report.

    BEFORE_DATA -> IN_DATA on a line starting with $$SOE.
    IN_DATA -> DONE on a line starting with $$EOE, or on the first usable row.
    Blank rows are skipped, short rows are counted but not used.
    """
    result = ScanResult(state=ScanState.BEFORE_DATA)
    if not text:
        return result

    for line in text.splitlines():
        if result.state is ScanState.BEFORE_DATA:
            if line.startswith(START_MARKER):
                result.state = ScanState.IN_DATA
                result.saw_start = True
            continue

        if result.state is ScanState.IN_DATA:
            if line.startswith(END_MARKER):
                result.state = ScanState.DONE
                break
            if not line.strip():
                continue
            result.data_rows += 1
            sample = parse_row(line)
            if sample is not None:
                result.sample = sample
                result.state = ScanState.DONE
                break

    return result


def extract_ra_dec(text):
    """
    Pulls the first RA/Dec sample out of a report.

    Raises:
        NoEphemerisData: no $$SOE marker, an empty data region, or no row with enough columns.
    """
    result = scan_ephemeris(text)
    if result.found:
        logger.debug(f"Ephemeris row {result.sample.timestamp}: RA={result.sample.ra}, Dec={result.sample.dec}")
        return result.sample
    if not result.saw_start:
        raise NoEphemerisData(f"no {START_MARKER} marker in ephemeris text")
    if result.data_rows == 0:
        raise NoEphemerisData("ephemeris data region is empty")
    raise NoEphemerisData(f"none of {result.data_rows} ephemeris rows had RA and Dec columns")

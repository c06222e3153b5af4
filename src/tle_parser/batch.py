"""
Batch parsing of multi-record TLE documents.

This module splits catalog files such as CelesTrak or Space-Track dumps into
individual records, filters parsed records, and parses them either
sequentially or across a pool of worker processes.
"""

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging
import multiprocessing as mp
import os

from .models import ParsedTLE, TLEFormatError, TLEParserError, TLEValidationError
from .normalize import is_comment, parse_tle_lines
from .parser import ParseOptions, parse_tle, resolve_options
from .utils import parse_number

logger = logging.getLogger(__name__)

# Global process pool for reuse (avoids repeated spawn overhead)
_process_pool: Optional[ProcessPoolExecutor] = None
_pool_max_workers: Optional[int] = None

StringCriterion = Union[str, Sequence[str], Callable[[str], bool]]


def split_tles(text: str) -> List[str]:
    """
    Split a multi-record document into individual TLE strings.

    A line starting with ``1`` opens a new record, keeping a satellite name
    that is waiting for it, and a ``2`` line joins the open record. Any other
    line is treated as a satellite name: it closes the pending record
    and starts the next. Comment lines are kept with the record that is open
    when they appear. Groups of fewer than two data lines are dropped.

    Args:
        text: Document containing any number of 2- or 3-line TLEs

    Returns:
        List of newline-joined TLE strings, in document order
    """
    records: List[str] = []
    current: List[str] = []

    def data_lines() -> List[str]:
        return [line for line in current if not is_comment(line)]

    def flush() -> None:
        if len(data_lines()) >= 2:
            records.append("\n".join(current))

    for line in parse_tle_lines(text):
        if is_comment(line):
            if current:
                current.append(line)
            continue

        if line[0] == "1":
            pending = data_lines()
            if len(pending) == 1 and pending[0][0] not in ("1", "2"):
                current.append(line)
            else:
                flush()
                current = [line]
        elif line[0] == "2":
            current.append(line)
        else:
            flush()
            current = [line]

    flush()
    return records


@dataclass
class TLEFilter:
    """
    Criteria for selecting parsed records.

    String criteria accept a single value, a list of values or a predicate.
    Satellite names match by substring; every other string criterion must
    match exactly. Unset criteria match everything.
    """

    satellite_number: Optional[StringCriterion] = None
    satellite_name: Optional[StringCriterion] = None
    international_designator: Optional[StringCriterion] = None
    classification: Optional[Union[str, Sequence[str]]] = None
    epoch_start: Optional[datetime] = None
    epoch_end: Optional[datetime] = None
    inclination_min: Optional[float] = None
    inclination_max: Optional[float] = None
    custom: Optional[Callable[[ParsedTLE], bool]] = None


def _matches(value: str, criterion: StringCriterion, substring: bool = False) -> bool:
    if callable(criterion):
        return bool(criterion(value))
    candidates = [criterion] if isinstance(criterion, str) else list(criterion)
    if substring:
        return any(candidate in value for candidate in candidates)
    return value in candidates


def apply_filter(record: ParsedTLE, tle_filter: TLEFilter) -> bool:
    """
    Check whether a parsed record satisfies every criterion of a filter.

    Args:
        record: Parsed TLE
        tle_filter: Filter criteria

    Returns:
        True if the record matches
    """
    if tle_filter.satellite_number is not None:
        if not _matches(record.satellite_number1, tle_filter.satellite_number):
            return False

    # Records without a name line are not excluded by a name criterion
    if tle_filter.satellite_name is not None and record.satellite_name:
        if not _matches(record.satellite_name, tle_filter.satellite_name, substring=True):
            return False

    if tle_filter.international_designator is not None:
        if not _matches(record.international_designator, tle_filter.international_designator):
            return False

    if tle_filter.classification is not None:
        if not _matches(record.classification, tle_filter.classification):
            return False

    if tle_filter.epoch_start is not None or tle_filter.epoch_end is not None:
        epoch = record.epoch_datetime
        if epoch is None:
            return False
        if tle_filter.epoch_start is not None and epoch < tle_filter.epoch_start:
            return False
        if tle_filter.epoch_end is not None and epoch > tle_filter.epoch_end:
            return False

    if tle_filter.inclination_min is not None or tle_filter.inclination_max is not None:
        inclination = parse_number(record.inclination)
        if inclination is None:
            return False
        if tle_filter.inclination_min is not None and inclination < tle_filter.inclination_min:
            return False
        if tle_filter.inclination_max is not None and inclination > tle_filter.inclination_max:
            return False

    if tle_filter.custom is not None and not tle_filter.custom(record):
        return False

    return True


def parse_batch(
    text: str,
    options: Union[ParseOptions, Mapping[str, Any], None] = None,
    tle_filter: Optional[TLEFilter] = None,
    continue_on_error: bool = False,
    limit: Optional[int] = None,
    skip: int = 0,
    on_tle: Optional[Callable[[ParsedTLE, int], None]] = None,
    on_error: Optional[Callable[[Exception, int, str], None]] = None,
) -> List[ParsedTLE]:
    """
    Parse every TLE in a multi-record document.

    Args:
        text: Document containing any number of TLEs
        options: Parse options applied to each record
        tle_filter: Optional criteria; non-matching records are dropped
        continue_on_error: Skip records that fail to parse instead of raising
        limit: Maximum number of records to return
        skip: Number of leading records to ignore
        on_tle: Callback(record, index) for each accepted record
        on_error: Callback(exception, index, raw_text) for each failure

    Returns:
        Parsed records in document order

    Raises:
        TLEParserError: On the first failing record unless continue_on_error
    """
    opts = resolve_options(ParseOptions, options, {})
    records = split_tles(text)
    results: List[ParsedTLE] = []
    failures = 0

    for index, raw in enumerate(records):
        if index < skip:
            continue
        if limit is not None and len(results) >= limit:
            break

        try:
            parsed = parse_tle(raw, opts)
        except TLEParserError as e:
            failures += 1
            if on_error:
                on_error(e, index, raw)
            if not continue_on_error:
                raise
            logger.warning(f"Skipping TLE #{index}: {e}")
            continue

        if tle_filter is not None and not apply_filter(parsed, tle_filter):
            continue

        results.append(parsed)
        if on_tle:
            on_tle(parsed, index)

    logger.info(
        f"Parsed {len(results)} of {len(records)} TLE records ({failures} failed)"
    )
    return results


def get_optimal_workers(max_workers: Optional[int] = None, num_records: int = 0) -> int:
    """
    Determine optimal number of worker processes.

    Args:
        max_workers: Maximum number of workers (None = auto-detect)
        num_records: Number of records to parse

    Returns:
        Number of workers, never more than the CPU count or the record count
    """
    cpu_count = os.cpu_count() or 4

    if max_workers is not None:
        optimal = min(max_workers, cpu_count)
    else:
        optimal = cpu_count

    if num_records > 0:
        optimal = min(optimal, num_records)

    return max(1, optimal)


def get_or_create_process_pool(max_workers: int) -> ProcessPoolExecutor:
    """
    Get or create a reusable process pool.

    Args:
        max_workers: Number of worker processes

    Returns:
        ProcessPoolExecutor instance
    """
    global _process_pool, _pool_max_workers

    if _process_pool is not None and _pool_max_workers == max_workers:
        return _process_pool

    if _process_pool is not None:
        _process_pool.shutdown(wait=False)

    mp_context = None
    try:
        mp_context = mp.get_context("fork")
        logger.debug("Using 'fork' context for faster worker startup")
    except ValueError:
        logger.debug("'fork' context not available, using default start method")

    _process_pool = ProcessPoolExecutor(max_workers=max_workers, mp_context=mp_context)
    _pool_max_workers = max_workers

    return _process_pool


def cleanup_process_pool() -> None:
    """Shut down the reusable process pool, if one was created."""
    global _process_pool, _pool_max_workers

    if _process_pool is not None:
        logger.info("Shutting down process pool...")
        _process_pool.shutdown(wait=True)
        _process_pool = None
        _pool_max_workers = None


def _parse_worker(
    index: int, raw: str, options: ParseOptions
) -> Tuple[int, Optional[ParsedTLE], Optional[Dict[str, Any]]]:
    """
    Parse one record in a worker process.

    Failures are returned as plain payloads; the parser exceptions carry
    issue lists that do not survive pickling through their constructors.
    """
    try:
        return index, parse_tle(raw, options), None
    except TLEValidationError as e:
        return index, None, {
            "kind": "validation",
            "message": str(e),
            "errors": e.errors,
            "warnings": e.warnings,
        }
    except TLEFormatError as e:
        return index, None, {
            "kind": "format",
            "message": str(e),
            "code": e.code,
            "details": e.details,
        }


def _rebuild_error(payload: Dict[str, Any]) -> TLEParserError:
    if payload["kind"] == "validation":
        return TLEValidationError(payload["message"], payload["errors"], payload["warnings"])
    return TLEFormatError(payload["message"], payload["code"], payload["details"])


def parse_parallel(
    text: str,
    options: Union[ParseOptions, Mapping[str, Any], None] = None,
    max_workers: Optional[int] = None,
    continue_on_error: bool = False,
) -> List[ParsedTLE]:
    """
    Parse every TLE in a document across worker processes.

    Records are independent, so the result is identical to ``parse_batch``
    for the same input, in the same order.

    Args:
        text: Document containing any number of TLEs
        options: Parse options applied to each record
        max_workers: Maximum worker processes (None = auto-detect)
        continue_on_error: Skip failing records instead of raising

    Returns:
        Parsed records in document order

    Raises:
        TLEParserError: The first failure in document order, unless
            continue_on_error
    """
    opts = resolve_options(ParseOptions, options, {})
    records = split_tles(text)
    if not records:
        return []

    workers = get_optimal_workers(max_workers, len(records))
    logger.info(f"Parsing {len(records)} TLE records using {workers} workers")

    executor = get_or_create_process_pool(workers)
    futures = [
        executor.submit(_parse_worker, index, raw, opts) for index, raw in enumerate(records)
    ]

    outcomes: Dict[int, Tuple[Optional[ParsedTLE], Optional[Dict[str, Any]]]] = {}
    for future in as_completed(futures):
        index, parsed, failure = future.result()
        outcomes[index] = (parsed, failure)

    results: List[ParsedTLE] = []
    failures = 0
    for index in range(len(records)):
        parsed, failure = outcomes[index]
        if failure is not None:
            failures += 1
            if not continue_on_error:
                raise _rebuild_error(failure)
            logger.warning(f"Skipping TLE #{index}: {failure['message']}")
            continue
        results.append(parsed)

    logger.info(
        f"Parallel parse complete: {len(results)} of {len(records)} records ({failures} failed)"
    )
    return results

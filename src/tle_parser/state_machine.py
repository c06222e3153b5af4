"""
State machine parser for TLE data with error recovery.

Unlike the strict parser this never stops at the first broken field. It walks
a fixed sequence of states, extracts whatever it can from each line, and
records every assumption or repair it makes in a recovery ledger so callers
get a best-effort record together with a full audit trail.
"""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Union
import logging
import time

from .checksum import validate_checksum
from .error_codes import ErrorCode
from .fields import LINE1_FIELDS, LINE2_FIELDS, LINE_LENGTH, FieldSpec
from .heuristics import detect_warnings
from .models import ParsedTLE, Severity, TLEIssue
from .normalize import parse_tle_lines, split_comments
from .parser import require_string, resolve_options
from .validators import VALID_CLASSIFICATIONS, check_ranges, validate_satellite_name

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    """States of the recovery parser."""

    INITIAL = "INITIAL"
    DETECTING_FORMAT = "DETECTING_FORMAT"
    PARSING_NAME = "PARSING_NAME"
    PARSING_LINE1 = "PARSING_LINE1"
    PARSING_LINE2 = "PARSING_LINE2"
    VALIDATING = "VALIDATING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


TERMINAL_STATES = frozenset({ParserState.COMPLETED, ParserState.ERROR})


class RecoveryAction(str, Enum):
    """Corrective actions recorded in the recovery ledger."""

    CONTINUE = "CONTINUE"  # Keep parsing despite the problem
    SKIP_FIELD = "SKIP_FIELD"
    USE_DEFAULT = "USE_DEFAULT"  # Partial or empty value substituted
    ATTEMPT_FIX = "ATTEMPT_FIX"
    ABORT = "ABORT"


@dataclass(frozen=True)
class RecoveryRecord:
    """One entry of the recovery ledger."""

    action: RecoveryAction
    description: str
    state: ParserState
    timestamp: float
    details: Dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "description": self.description,
            "state": self.state.value,
            "timestamp": self.timestamp,
            **self.details,
        }


class StateTransition(NamedTuple):
    from_state: ParserState
    to_state: ParserState
    reason: str


@dataclass
class RecoveryOptions:
    """
    Options for the recovery parser.

    Attributes:
        attempt_recovery: Search excess lines and record repairs
        include_partial_results: Finish in COMPLETED even after critical errors
        strict_mode: Without recovery, skip field extraction of wrong-length lines
        max_iterations: Cap on state transitions before STATE_MACHINE_LOOP
        reference_time: "now" for the stale-epoch check (default: current UTC)
    """

    attempt_recovery: bool = True
    include_partial_results: bool = True
    strict_mode: bool = False
    max_iterations: int = 100
    reference_time: Optional[datetime] = None

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.reference_time is not None and not isinstance(self.reference_time, datetime):
            raise ValueError(
                f"reference_time must be a datetime, got {type(self.reference_time).__name__}"
            )


@dataclass
class ParserContext:
    """
    Mutable state of a single recovery parse.

    A fresh context is created for every call and never outlives it.
    """

    state: ParserState = ParserState.INITIAL
    lines: List[str] = dataclass_field(default_factory=list)
    comments: List[str] = dataclass_field(default_factory=list)
    line_count: int = 0
    has_name: bool = False
    name_index: int = -1
    line1_index: int = -1
    line2_index: int = -1
    data: Dict[str, Optional[str]] = dataclass_field(default_factory=dict)
    errors: List[TLEIssue] = dataclass_field(default_factory=list)
    warnings: List[TLEIssue] = dataclass_field(default_factory=list)
    ledger: List[RecoveryRecord] = dataclass_field(default_factory=list)
    transitions: List[StateTransition] = dataclass_field(default_factory=list)
    has_critical: bool = False

    def add_issue(self, issue: TLEIssue, critical: bool = False) -> None:
        if issue.severity == Severity.WARNING:
            self.warnings.append(issue)
        else:
            self.errors.append(issue)
        if critical:
            self.has_critical = True

    def record(self, action: RecoveryAction, description: str, **details: Any) -> None:
        logger.debug(f"Recovery action {action.value} in {self.state.value}: {description}")
        self.ledger.append(
            RecoveryRecord(
                action=action,
                description=description,
                state=self.state,
                timestamp=time.time(),
                details=details,
            )
        )

    def move_to(self, new_state: ParserState, reason: str = "") -> None:
        self.transitions.append(StateTransition(self.state, new_state, reason))
        self.state = new_state

    def line_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None


@dataclass
class RecoveryResult:
    """Best-effort outcome of a recovery parse."""

    success: bool
    state: ParserState
    data: Dict[str, Optional[str]]
    record: Optional[ParsedTLE]
    errors: List[TLEIssue]
    warnings: List[TLEIssue]
    recovery_actions: List[RecoveryRecord]
    transitions: List[StateTransition]
    comments: List[str]
    context: Dict[str, Any]

    @property
    def actions(self) -> List[RecoveryAction]:
        """Recovery action kinds in the order they were taken."""
        return [entry.action for entry in self.recovery_actions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "state": self.state.value,
            "data": dict(self.data),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "recovery_actions": [r.to_dict() for r in self.recovery_actions],
            "comments": list(self.comments),
            "context": dict(self.context),
        }


def _issue(
    code: ErrorCode,
    message: str,
    severity: Severity = Severity.ERROR,
    critical: bool = False,
    **kwargs: Any,
) -> TLEIssue:
    details = kwargs.pop("details", {})
    if critical:
        details = {**details, "critical": True}
    return TLEIssue(code=code, message=message, severity=severity, details=details, **kwargs)


class TLEStateMachineParser:
    """
    Recovery parser driven by an explicit transition table.

    Each handler performs the work of one state on the context and returns
    the next state. The loop stops in COMPLETED or ERROR, or after
    ``max_iterations`` transitions.

    Example:
        >>> parser = TLEStateMachineParser(RecoveryOptions(strict_mode=True))
        >>> result = parser.parse(raw_text)
        >>> result.success, result.actions
    """

    def __init__(self, options: Optional[RecoveryOptions] = None):
        self.options = options or RecoveryOptions()
        self._handlers: Dict[ParserState, Callable[[ParserContext], ParserState]] = {
            ParserState.DETECTING_FORMAT: self._after_detection,
            ParserState.PARSING_NAME: self._parse_name,
            ParserState.PARSING_LINE1: self._parse_line1,
            ParserState.PARSING_LINE2: self._parse_line2,
            ParserState.VALIDATING: self._validate,
        }

    def parse(self, tle_string: str) -> RecoveryResult:
        """
        Parse a TLE, recovering from as many problems as possible.

        Raises:
            TypeError: If ``tle_string`` is not a string
        """
        require_string(tle_string)
        ctx = ParserContext()

        if not tle_string.strip():
            ctx.add_issue(
                _issue(
                    ErrorCode.EMPTY_INPUT,
                    "TLE string cannot be empty",
                    critical=True,
                    details={"input_length": len(tle_string)},
                ),
                critical=True,
            )
            ctx.move_to(ParserState.ERROR, "Empty input")
            return self._result(ctx)

        ctx.move_to(ParserState.DETECTING_FORMAT, "Starting parse")
        self._detect_format(ctx, tle_string)
        if ctx.state == ParserState.DETECTING_FORMAT:
            self._run(ctx)

        return self._result(ctx)

    def _run(self, ctx: ParserContext) -> None:
        iterations = 0
        while ctx.state not in TERMINAL_STATES and iterations < self.options.max_iterations:
            handler = self._handlers.get(ctx.state)
            if handler is None:
                ctx.move_to(ParserState.ERROR, "Unexpected state")
            else:
                ctx.move_to(handler(ctx))
            iterations += 1

        if ctx.state not in TERMINAL_STATES:
            ctx.add_issue(
                _issue(
                    ErrorCode.STATE_MACHINE_LOOP,
                    "State machine exceeded maximum iterations",
                    critical=True,
                    details={"iterations": iterations},
                ),
                critical=True,
            )
            ctx.move_to(ParserState.ERROR, "Iteration limit reached")

    def _detect_format(self, ctx: ParserContext, tle_string: str) -> None:
        lines, comments = split_comments(parse_tle_lines(tle_string))
        ctx.lines = lines
        ctx.comments = comments
        ctx.line_count = len(lines)

        if len(lines) < 2:
            ctx.add_issue(
                _issue(
                    ErrorCode.INVALID_LINE_COUNT,
                    f"TLE must contain at least 2 lines (found {len(lines)})",
                    critical=True,
                    expected="2 or 3",
                    actual=len(lines),
                ),
                critical=True,
            )
            if self.options.attempt_recovery:
                ctx.record(
                    RecoveryAction.ABORT,
                    "Insufficient lines to parse TLE",
                    line_count=len(lines),
                )
            ctx.move_to(ParserState.ERROR, "Insufficient lines")
            return

        if len(lines) > 3:
            ctx.add_issue(
                _issue(
                    ErrorCode.INVALID_LINE_COUNT,
                    f"TLE should contain 2 or 3 lines (found {len(lines)})",
                    expected="2 or 3",
                    actual=len(lines),
                )
            )
            if self.options.attempt_recovery:
                self._locate_lines(ctx)
            return

        if len(lines) == 3:
            ctx.has_name = True
            ctx.name_index, ctx.line1_index, ctx.line2_index = 0, 1, 2
        else:
            ctx.line1_index, ctx.line2_index = 0, 1

    def _locate_lines(self, ctx: ParserContext) -> None:
        """Pick the unique 1-line and 2-line out of excess input lines."""
        lines = ctx.lines
        ctx.record(
            RecoveryAction.ATTEMPT_FIX,
            "Attempting to identify valid TLE lines from excess lines",
            line_count=len(lines),
        )

        line1_candidates = [i for i, line in enumerate(lines) if line.startswith("1")]
        line2_candidates = [i for i, line in enumerate(lines) if line.startswith("2")]
        if len(line1_candidates) != 1 or len(line2_candidates) != 1:
            return

        line1_index, line2_index = line1_candidates[0], line2_candidates[0]
        if line1_index > line2_index:
            return

        # The line just before line 1, when there is one, is taken as the name
        selected = [lines[line1_index], lines[line2_index]]
        if line1_index > 0:
            selected.insert(0, lines[line1_index - 1])
            ctx.has_name = True
            ctx.name_index, ctx.line1_index, ctx.line2_index = 0, 1, 2
        else:
            ctx.line1_index, ctx.line2_index = 0, 1
        ctx.lines = selected
        ctx.line_count = len(selected)

        ctx.record(
            RecoveryAction.CONTINUE,
            "Successfully identified TLE lines from excess input",
            extracted_lines=len(selected),
        )

    def _after_detection(self, ctx: ParserContext) -> ParserState:
        return ParserState.PARSING_NAME if ctx.has_name else ParserState.PARSING_LINE1

    def _parse_name(self, ctx: ParserContext) -> ParserState:
        name = ctx.line_at(ctx.name_index)
        if name is not None:
            ctx.data["satellite_name"] = name
            for warning in validate_satellite_name(name):
                ctx.add_issue(warning)
        return ParserState.PARSING_LINE1

    def _parse_line1(self, ctx: ParserContext) -> ParserState:
        line = self._parse_data_line(ctx, 1, ctx.line1_index, LINE1_FIELDS)
        if line is not None:
            classification = ctx.data.get("classification")
            if classification and classification not in VALID_CLASSIFICATIONS:
                ctx.add_issue(
                    _issue(
                        ErrorCode.INVALID_CLASSIFICATION,
                        f"Classification must be U, C, or S (got '{classification}')",
                        line=1,
                        field="classification",
                        expected=list(VALID_CLASSIFICATIONS),
                        actual=classification,
                    )
                )
        return ParserState.PARSING_LINE2

    def _parse_line2(self, ctx: ParserContext) -> ParserState:
        self._parse_data_line(ctx, 2, ctx.line2_index, LINE2_FIELDS)
        return ParserState.VALIDATING

    def _parse_data_line(
        self, ctx: ParserContext, line_number: int, index: int, specs: tuple
    ) -> Optional[str]:
        """Shared line 1 / line 2 handling; returns the line if it was found."""
        line = ctx.line_at(index)
        if line is None:
            ctx.add_issue(
                _issue(
                    ErrorCode.LINE_NOT_FOUND,
                    f"Line {line_number} could not be located",
                    critical=True,
                    line=line_number,
                    details={"index": index},
                ),
                critical=True,
            )
            return None

        ctx.data[f"line{line_number}_raw"] = line

        if len(line) != LINE_LENGTH:
            ctx.add_issue(
                _issue(
                    ErrorCode.INVALID_LINE_LENGTH,
                    f"Line {line_number} must be exactly {LINE_LENGTH} characters (got {len(line)})",
                    severity=Severity.WARNING,
                    line=line_number,
                    expected=LINE_LENGTH,
                    actual=len(line),
                )
            )
            if self.options.attempt_recovery:
                ctx.record(
                    RecoveryAction.CONTINUE,
                    f"Attempting to parse Line {line_number} despite incorrect length",
                    line=line_number,
                    length=len(line),
                )
            elif self.options.strict_mode:
                return line

        for spec in specs:
            self.parse_field_safe(ctx, spec, line)

        line_number_field = ctx.data.get(f"line_number{line_number}")
        if line_number_field != str(line_number):
            ctx.add_issue(
                _issue(
                    ErrorCode.INVALID_LINE_NUMBER,
                    f"Line {line_number} must start with '{line_number}' (got '{line_number_field}')",
                    line=line_number,
                    expected=str(line_number),
                    actual=line_number_field,
                )
            )

        if len(line) == LINE_LENGTH:
            checksum = validate_checksum(line)
            if not checksum.is_valid and checksum.error is not None:
                ctx.add_issue(
                    _issue(
                        checksum.error.code,
                        f"Line {line_number}: {checksum.error.message}",
                        line=line_number,
                        field="checksum",
                        expected=checksum.error.expected,
                        actual=checksum.error.actual,
                    )
                )
                if self.options.attempt_recovery:
                    ctx.record(
                        RecoveryAction.CONTINUE,
                        "Continuing despite checksum mismatch",
                        line=line_number,
                    )
        return line

    def parse_field_safe(self, ctx: ParserContext, spec: FieldSpec, line: str) -> None:
        """
        Extract one field, tolerating lines that are too short.

        A field cut by the end of the line keeps its truncated value and a
        field beyond the end of the line is stored as None; both are reported
        as warnings.
        """
        if len(line) >= spec.end:
            ctx.data[spec.name] = line[spec.start:spec.end].strip()
            return

        if len(line) > spec.start:
            ctx.data[spec.name] = line[spec.start:].strip()
            code, message = ErrorCode.PARTIAL_FIELD, f"{spec.label} is incomplete due to short line"
            description = f"Using partial value for {spec.label}"
        else:
            ctx.data[spec.name] = None
            code, message = ErrorCode.MISSING_FIELD, f"{spec.label} is missing due to short line"
            description = f"Using empty value for missing {spec.label}"

        ctx.add_issue(
            _issue(
                code,
                message,
                severity=Severity.WARNING,
                line=spec.line,
                field=spec.name,
                expected=[spec.start, spec.end],
                actual=len(line),
            )
        )
        if self.options.attempt_recovery:
            ctx.record(RecoveryAction.USE_DEFAULT, description, field=spec.name)

    def _validate(self, ctx: ParserContext) -> ParserState:
        sat1 = ctx.data.get("satellite_number1")
        sat2 = ctx.data.get("satellite_number2")
        if sat1 and sat2 and sat1 != sat2:
            ctx.add_issue(
                _issue(
                    ErrorCode.SATELLITE_NUMBER_MISMATCH,
                    f"Satellite numbers must match (Line 1: {sat1}, Line 2: {sat2})",
                    field="satellite_number",
                    expected=sat1,
                    actual=sat2,
                )
            )

        for rule, issue in check_ranges(ctx.data, skip_blank=True):
            ctx.add_issue(issue.as_warning() if rule.warning_only else issue)

        for warning in detect_warnings(
            ctx.line_at(ctx.line1_index),
            ctx.line_at(ctx.line2_index),
            self.options.reference_time,
        ):
            ctx.add_issue(warning)

        if ctx.has_critical and not self.options.include_partial_results:
            return ParserState.ERROR
        return ParserState.COMPLETED

    def _result(self, ctx: ParserContext) -> RecoveryResult:
        record = None
        if any(ctx.data.get(spec.name) is not None for spec in LINE1_FIELDS + LINE2_FIELDS):
            record = ParsedTLE(
                satellite_name=ctx.data.get("satellite_name"),
                **{
                    spec.name: ctx.data.get(spec.name) or ""
                    for spec in LINE1_FIELDS + LINE2_FIELDS
                },
                comments=tuple(ctx.comments) if ctx.comments else None,
            )

        logger.debug(
            f"Recovery parse finished in {ctx.state.value} with {len(ctx.errors)} error(s), "
            f"{len(ctx.warnings)} warning(s), {len(ctx.ledger)} recovery action(s)"
        )
        return RecoveryResult(
            success=ctx.state == ParserState.COMPLETED,
            state=ctx.state,
            data=dict(ctx.data),
            record=record,
            errors=list(ctx.errors),
            warnings=list(ctx.warnings),
            recovery_actions=list(ctx.ledger),
            transitions=list(ctx.transitions),
            comments=list(ctx.comments),
            context={
                "line_count": ctx.line_count,
                "has_name": ctx.has_name,
                "recovery_attempts": len(ctx.ledger),
            },
        )


def parse_with_recovery(
    tle_string: str,
    options: Union[RecoveryOptions, Mapping[str, Any], None] = None,
    **overrides: Any,
) -> RecoveryResult:
    """
    Parse a TLE with the recovery state machine.

    Args:
        tle_string: Raw TLE text
        options: RecoveryOptions instance or mapping of option values
        **overrides: Individual option values

    Returns:
        RecoveryResult with the best-effort record and the full audit trail

    Raises:
        TypeError: If ``tle_string`` is not a string
    """
    require_string(tle_string)
    opts = resolve_options(RecoveryOptions, options, overrides)
    return TLEStateMachineParser(opts).parse(tle_string)

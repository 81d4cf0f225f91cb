"""Pydantic models for the anomaly reports"""

from datetime import datetime

from pydantic import BaseModel, Field


class Anomaly(BaseModel):
    """A line that is far from every baseline line

    Attributes:
        distance: Distance to the closest baseline line (0.0 = known line, 1.0 = never seen)
        pos: Line position in the source (0-based)
        line: The raw line content
    """

    distance: float = Field(..., ge=0.0, examples=[0.72], description='Distance to the closest baseline line')
    pos: int = Field(..., ge=0, examples=[42], description='Line position in the source (0-based)')
    line: str = Field(..., examples=['ERROR: unexpected crash'], description='The raw line')


class AnomalyContext(BaseModel):
    """An anomaly with the lines surrounding it"""

    before: list[str] = Field(default_factory=list, description='Lines preceding the anomaly, in order')
    anomaly: Anomaly
    after: list[str] = Field(default_factory=list, description='Lines following the anomaly, in order')


class LogReport(BaseModel):
    """The anomalies of one target source"""

    source: str = Field(..., examples=['local: job-output.txt'], description='The target source')
    index_name: str = Field(..., examples=['job-output.txt'], description='Name of the index used')
    test_time: float = Field(..., examples=[0.123], description='Inspection duration in seconds')
    anomalies: list[AnomalyContext] = Field(default_factory=list)


class SourceFailure(BaseModel):
    """A target source that could not be inspected"""

    source: str = Field(..., examples=['remote: logs/syslog.txt'])
    message: str = Field(..., examples=['http status 404'])


class Report(BaseModel):
    """The result of inspecting a target content

    Only the sources with at least one anomaly are part of targets.
    """

    created_at: datetime
    target: str = Field(..., examples=['Directory(local: )'], description='The inspected content')
    baselines: list[str] = Field(default_factory=list, description='The baselines of the model')
    targets: list[LogReport] = Field(default_factory=list)
    errors: list[SourceFailure] = Field(default_factory=list)

    @property
    def total_anomalies(self) -> int:
        return sum(len(log_report.anomalies) for log_report in self.targets)

    def to_cli(self, colorize: bool = False) -> str:
        """Format report for CLI output"""
        # ANSI color codes
        GREY = '\033[90m'
        RED = '\033[91m'
        YELLOW = '\033[33m'
        BOLD_CYAN = '\033[1;36m'
        BOLD_GREEN = '\033[1;32m'
        RESET = '\033[0m'

        def paint(color: str, text: str) -> str:
            return f'{color}{text}{RESET}' if colorize else text

        lines = []
        lines.append(f'{paint(GREY, "Target:")} {paint(BOLD_CYAN, self.target)}')
        if self.baselines:
            lines.append(f'{paint(GREY, "Baselines:")} {", ".join(self.baselines)}')
        lines.append(f'{paint(GREY, "Created:")} {self.created_at.isoformat(timespec="seconds")}')

        for log_report in self.targets:
            lines.append('')
            header = f'=== {log_report.source} ({len(log_report.anomalies)} anomalies, {log_report.test_time:.3f}s) ==='
            lines.append(paint(BOLD_CYAN, header))
            # Contexts of close anomalies overlap, print each line once
            rows: dict[int, tuple[str, float | None]] = {}
            for context in log_report.anomalies:
                anomaly = context.anomaly
                for pos, line in enumerate(context.before, start=anomaly.pos - len(context.before)):
                    rows.setdefault(pos, (line, None))
                rows[anomaly.pos] = (anomaly.line, anomaly.distance)
                for pos, line in enumerate(context.after, start=anomaly.pos + 1):
                    rows.setdefault(pos, (line, None))

            previous_pos = None
            for pos in sorted(rows):
                if previous_pos is not None and pos > previous_pos + 1:
                    lines.append(paint(GREY, '--'))
                previous_pos = pos
                line, distance = rows[pos]
                if distance is None:
                    lines.append(f'{paint(GREY, f"{pos:>6}")}      {line}')
                else:
                    score = paint(RED, f'{distance:.2f}')
                    lines.append(f'{paint(YELLOW, f"{pos:>6}")} {score} {line_or_empty(line)}')

        for failure in self.errors:
            lines.append('')
            lines.append(f'{paint(RED, "Error:")} {failure.source}: {failure.message}')

        lines.append('')
        summary = f'{self.total_anomalies} anomalies found in {len(self.targets)} sources'
        lines.append(paint(BOLD_GREEN, summary))
        return '\n'.join(lines)


def line_or_empty(line: str) -> str:
    return line if line else '<empty line>'

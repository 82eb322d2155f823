"""
Autofix Telemetry
Records autofix gate decisions for later analysis of heuristic quality:
confidence distribution, per-rule application rate and heuristics that
look too aggressive or too permissive.

Recording is a no-op while telemetry is disabled. Appends are guarded
by a lock so rules may run on several worker threads.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..types import AmbiguityInfo, AutofixDecision

logger = logging.getLogger(__name__)

CONFIDENCE_BUCKETS = ('0.0-0.3', '0.3-0.5', '0.5-0.7', '0.7-1.0')
NEAR_THRESHOLD_RANGE = (0.45, 0.55)


def _bucket_for(confidence: float) -> str:
    if confidence < 0.3:
        return '0.0-0.3'
    if confidence < 0.5:
        return '0.3-0.5'
    if confidence < 0.7:
        return '0.5-0.7'
    return '0.7-1.0'


def _numeric_items(heuristics: Mapping[str, Any]):
    for name, value in heuristics.items():
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            yield name, value


class AutofixTelemetry:
    """In-memory log of autofix decisions."""

    def __init__(self, enabled: bool = False, verbose: bool = False):
        self.enabled = enabled
        self.verbose = verbose
        self._decisions: List[AutofixDecision] = []
        self._lock = threading.Lock()
        self.start_time = time.time()

    def record_decision(self, decision: AutofixDecision) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._decisions.append(decision)

    @property
    def decisions(self) -> List[AutofixDecision]:
        with self._lock:
            return list(self._decisions)

    def get_data(self) -> Dict[str, Any]:
        return {
            'decisions': [decision.to_dict() for decision in self.decisions],
            'start_time': self.start_time,
            'end_time': time.time(),
        }

    def get_statistics(self) -> Dict[str, Any]:
        """
        Aggregate statistics over every recorded decision.

        Returns:
            Dict with totals, application rate, average confidence,
            per-rule statistics and the confidence distribution buckets.
        """
        decisions = self.decisions
        distribution = {bucket: 0 for bucket in CONFIDENCE_BUCKETS}
        if not decisions:
            return {
                'total_decisions': 0,
                'applied': 0,
                'skipped': 0,
                'average_confidence': 0.0,
                'application_rate': 0.0,
                'by_rule': {},
                'confidence_distribution': distribution,
            }

        by_rule: Dict[str, Dict[str, Any]] = {}
        for decision in decisions:
            stats = by_rule.setdefault(decision.rule, {
                'total_decisions': 0, 'applied': 0, 'skipped': 0, 'confidence_sum': 0.0,
            })
            stats['total_decisions'] += 1
            stats['confidence_sum'] += decision.confidence
            stats['applied' if decision.applied else 'skipped'] += 1
            distribution[_bucket_for(decision.confidence)] += 1

        for stats in by_rule.values():
            total = stats['total_decisions']
            stats['average_confidence'] = stats.pop('confidence_sum') / total
            stats['application_rate'] = stats['applied'] / total

        applied = sum(1 for decision in decisions if decision.applied)
        return {
            'total_decisions': len(decisions),
            'applied': applied,
            'skipped': len(decisions) - applied,
            'average_confidence': sum(d.confidence for d in decisions) / len(decisions),
            'application_rate': applied / len(decisions),
            'by_rule': by_rule,
            'confidence_distribution': distribution,
        }

    def get_insights(self) -> Dict[str, Any]:
        """
        Point at heuristics worth retuning.

        A heuristic is potentially aggressive when it penalized at least
        three skipped fixes by more than 0.2 on average, and potentially
        permissive when it boosted at least three low-confidence applied
        fixes by less than 0.15 on average.
        """
        insights = {
            'potentially_aggressive_heuristics': [],
            'potentially_permissive_heuristics': [],
            'threshold_recommendations': {
                'near_threshold_count': 0,
                'current_threshold': 0.5,
                'suggestion': '',
            },
        }
        decisions = self.decisions
        if not decisions:
            return insights

        penalties: Dict[str, List[float]] = {}
        for decision in decisions:
            if decision.applied:
                continue
            for name, value in _numeric_items(decision.heuristics):
                if value < 0:
                    penalties.setdefault(name, []).append(abs(value))

        boosts: Dict[str, List[float]] = {}
        for decision in decisions:
            if not decision.applied or decision.confidence >= 0.6:
                continue
            for name, value in _numeric_items(decision.heuristics):
                if value > 0:
                    boosts.setdefault(name, []).append(value)

        insights['potentially_aggressive_heuristics'] = [
            name for name, values in penalties.items()
            if len(values) >= 3 and sum(values) / len(values) > 0.2
        ]
        insights['potentially_permissive_heuristics'] = [
            name for name, values in boosts.items()
            if len(values) >= 3 and sum(values) / len(values) < 0.15
        ]

        low, high = NEAR_THRESHOLD_RANGE
        near = [d for d in decisions if low <= d.confidence <= high]
        recommendations = insights['threshold_recommendations']
        recommendations['near_threshold_count'] = len(near)

        if len(near) > len(decisions) * 0.3:
            recommendations['suggestion'] = (
                'High concentration of decisions near threshold (0.5). '
                'Consider adjusting heuristic weights for clearer separation.'
            )
        elif near:
            rate = sum(1 for d in near if d.applied) / len(near)
            if rate < 0.3:
                recommendations['suggestion'] = (
                    'Many decisions near threshold are being skipped. '
                    'Consider lowering threshold or reducing heuristic penalties.'
                )
            elif rate > 0.7:
                recommendations['suggestion'] = (
                    'Many decisions near threshold are being applied. '
                    'Consider raising threshold or increasing heuristic penalties for safety.'
                )

        return insights

    def format_summary(self) -> str:
        stats = self.get_statistics()
        insights = self.get_insights()
        distribution = stats['confidence_distribution']

        lines = [
            '=== Autofix Telemetry Summary ===',
            f"Total decisions: {stats['total_decisions']}",
            f"Applied: {stats['applied']} ({stats['application_rate'] * 100:.1f}%)",
            f"Skipped: {stats['skipped']}",
            f"Average confidence: {stats['average_confidence']:.3f}",
            'Confidence distribution:',
        ]
        lines.extend(f"  {bucket}: {distribution[bucket]}" for bucket in CONFIDENCE_BUCKETS)

        for rule, rule_stats in stats['by_rule'].items():
            lines.append(f"  {rule}: {rule_stats['total_decisions']} decisions, "
                         f"{rule_stats['applied']} applied, "
                         f"avg confidence {rule_stats['average_confidence']:.3f}")

        for heuristic in insights['potentially_aggressive_heuristics']:
            lines.append(f"Potentially aggressive heuristic: {heuristic}")
        for heuristic in insights['potentially_permissive_heuristics']:
            lines.append(f"Potentially permissive heuristic: {heuristic}")

        suggestion = insights['threshold_recommendations']['suggestion']
        if suggestion:
            lines.append(f"Threshold recommendation: {suggestion}")

        if self.verbose:
            for decision in self.decisions[:20]:
                location = f"{decision.file}:{decision.line_number}" if decision.file else 'unknown'
                lines.append(f"[{decision.rule}] {location} \"{decision.original}\" -> "
                             f"\"{decision.fixed}\" confidence={decision.confidence:.3f} "
                             f"applied={decision.applied}")

        return '\n'.join(lines)

    def to_json(self) -> str:
        end_time = time.time()
        return json.dumps({
            'decisions': [decision.to_dict() for decision in self.decisions],
            'statistics': self.get_statistics(),
            'insights': self.get_insights(),
            'metadata': {
                'start_time': self.start_time,
                'end_time': end_time,
                'duration': end_time - self.start_time,
            },
        }, indent=2)

    def reset(self) -> None:
        with self._lock:
            self._decisions = []
        self.start_time = time.time()


@dataclass(frozen=True)
class NeedsReviewItem:
    """A fix that was computed but needs a human decision before applying."""
    file: str
    line: int
    rule: str
    original: str
    suggested: str
    confidence: float
    ambiguity: Optional[AmbiguityInfo] = None
    context: Optional[str] = None
    heuristics: Mapping[str, Any] = field(default_factory=dict)


class NeedsReviewReporter:
    """
    Collects needs-review items until ``clear()`` is called.

    Items accumulate for the life of the process; a host that lints
    several documents calls ``reset_needs_review_reporter()`` between
    runs. A disabled reporter drops every item.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._items: List[NeedsReviewItem] = []
        self._lock = threading.Lock()

    def add_item(self, item: NeedsReviewItem) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._items.append(item)

    @property
    def items(self) -> List[NeedsReviewItem]:
        with self._lock:
            return list(self._items)

    def items_by_rule(self) -> Dict[str, List[NeedsReviewItem]]:
        grouped: Dict[str, List[NeedsReviewItem]] = {}
        for item in self.items:
            grouped.setdefault(item.rule, []).append(item)
        return grouped

    def items_by_file(self) -> Dict[str, List[NeedsReviewItem]]:
        grouped: Dict[str, List[NeedsReviewItem]] = {}
        for item in self.items:
            grouped.setdefault(item.file, []).append(item)
        return grouped

    def summary(self) -> Dict[str, Any]:
        items = self.items
        return {
            'total_items': len(items),
            'unique_files': len({item.file for item in items}),
            'unique_rules': len({item.rule for item in items}),
            'average_confidence': sum(item.confidence for item in items) / len(items) if items else 0.0,
        }

    def clear(self) -> None:
        with self._lock:
            self._items = []


# Global instances
_telemetry = None
_reporter = None
_instance_lock = threading.Lock()


def init_telemetry(enabled: bool = False, verbose: bool = False) -> AutofixTelemetry:
    """Replace the process-wide telemetry log."""
    global _telemetry
    telemetry = AutofixTelemetry(enabled=enabled, verbose=verbose)
    with _instance_lock:
        _telemetry = telemetry
    logger.debug(f"Autofix telemetry initialized (enabled={enabled}, verbose={verbose})")
    return telemetry


def get_telemetry() -> AutofixTelemetry:
    """Get the process-wide telemetry log, disabled unless initialized."""
    global _telemetry
    if _telemetry is None:
        with _instance_lock:
            if _telemetry is None:
                _telemetry = AutofixTelemetry(enabled=False)
    return _telemetry


def reset_telemetry() -> None:
    if _telemetry is not None:
        _telemetry.reset()


def init_needs_review_reporter(enabled: bool = True) -> NeedsReviewReporter:
    global _reporter
    reporter = NeedsReviewReporter(enabled=enabled)
    with _instance_lock:
        _reporter = reporter
    logger.debug(f"Needs-review reporter initialized (enabled={enabled})")
    return reporter


def get_needs_review_reporter() -> NeedsReviewReporter:
    global _reporter
    if _reporter is None:
        with _instance_lock:
            if _reporter is None:
                _reporter = NeedsReviewReporter()
    return _reporter


def reset_needs_review_reporter() -> None:
    """Drop collected items; call between documents in a long-lived host."""
    if _reporter is not None:
        _reporter.clear()

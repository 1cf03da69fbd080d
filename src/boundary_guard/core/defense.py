"""Multi-layer defense: compose the oracle with Phases A, B and C.

Per section type the flow is: oracle proposal (optional) -> Phase A ->
Phase C when the proposal is absent or rejected -> Phase B -> decision.
Every uncertain path ends in preservation.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from boundary_guard.core.boundary_validator import BoundaryValidator
from boundary_guard.core.confidence_tracker import ConfidenceTracker
from boundary_guard.core.content_verifier import ContentVerifier
from boundary_guard.core.document import apply_removals, split_lines
from boundary_guard.core.heuristic_detector import HeuristicBoundaryDetector
from boundary_guard.core.oracle import BoundaryOracle, OracleError
from boundary_guard.models.confidence import PhaseConfidence
from boundary_guard.models.decision import DefenseReport, DefenseState, SectionDecision
from boundary_guard.models.section import BoundaryInfo, SectionType

log = logging.getLogger(__name__)


@dataclass
class DefenseConfig:
    """Orchestrator settings."""

    section_types: list[SectionType] = field(default_factory=lambda: list(SectionType))
    oracle_timeout: float | None = 180.0  # Seconds per oracle call; None waits forever
    use_heuristic_fallback: bool = True
    fallback_penalty: float = 0.85


@dataclass
class OracleAnswer:
    """What the oracle said for one section type."""

    proposals: list[BoundaryInfo] | None = None  # None: no proposal
    error: str | None = None


class DefenseOrchestrator:
    """Decide which structural spans of a document may be removed."""

    def __init__(
        self,
        oracle: BoundaryOracle | None = None,
        config: DefenseConfig | None = None,
        validator: BoundaryValidator | None = None,
        verifier: ContentVerifier | None = None,
        detector: HeuristicBoundaryDetector | None = None,
    ):
        self.oracle = oracle
        self.config = config or DefenseConfig()
        self.validator = validator or BoundaryValidator()
        self.verifier = verifier or ContentVerifier()
        self.detector = detector or HeuristicBoundaryDetector()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def defend_section(
        self,
        content: str,
        section_type: SectionType,
        tracker: ConfidenceTracker | None = None,
    ) -> SectionDecision:
        """Run the full defense for one section type."""
        answer = await self.ask_oracle(content, section_type)
        decision = self.decide(content, section_type, answer)
        if tracker is not None and decision.confidence is not None:
            tracker.record(decision.confidence)
        return decision

    async def defend_document(
        self,
        content: str,
        section_types: list[SectionType] | None = None,
    ) -> DefenseReport:
        """Defend every section type of one document.

        Oracle requests are issued concurrently; the synchronous phases run
        once all answers are in. Nothing is removed here; apply
        ``report.removal_spans()`` with ``apply_removals`` afterwards.
        """
        types = self.config.section_types if section_types is None else section_types
        tracker = ConfidenceTracker()

        answers = await asyncio.gather(*(self.ask_oracle(content, t) for t in types))

        report = DefenseReport(line_count=len(split_lines(content)))
        for section_type, answer in zip(types, answers):
            decision = self.decide(content, section_type, answer)
            report.decisions.append(decision)
            if decision.confidence is not None:
                tracker.record(decision.confidence)
            for validation in decision.validations:
                report.validation_stats.record(validation)
            for verification in decision.verifications:
                report.verification_stats.record(verification)
            for detection in decision.detections:
                report.detection_stats.record(detection)

        report.confidence = tracker.snapshot()
        removed = [d.section_type.value for d in report.decisions if d.removed]
        log.info(
            f"Defense complete: {len(removed)} section type(s) removable "
            f"({', '.join(removed) or 'none'}), confidence {tracker.summary()}"
        )
        return report

    async def clean(
        self,
        content: str,
        section_types: list[SectionType] | None = None,
    ) -> tuple[str, DefenseReport]:
        """Defend a document and apply every accepted removal in one batch."""
        report = await self.defend_document(content, section_types)
        return apply_removals(content, report.removal_spans()), report

    # -------------------------------------------------------------------------
    # Oracle
    # -------------------------------------------------------------------------

    async def ask_oracle(self, content: str, section_type: SectionType) -> OracleAnswer:
        """Fetch a proposal; failures and timeouts become "no proposal"."""
        if self.oracle is None:
            return OracleAnswer()

        try:
            if section_type == SectionType.AUXILIARY_LISTS:
                lists = await asyncio.wait_for(
                    self.oracle.detect_auxiliary_lists(content),
                    timeout=self.config.oracle_timeout,
                )
                proposals = [info.to_boundary(notes=f"oracle: {info.list_type}") for info in lists]
                return OracleAnswer(proposals=proposals or None)

            boundary = await asyncio.wait_for(
                self.oracle.identify_boundaries(content, section_type),
                timeout=self.config.oracle_timeout,
            )
        except asyncio.TimeoutError:
            message = f"Oracle timed out after {self.config.oracle_timeout}s"
            log.warning(f"{section_type.value}: {message}")
            return OracleAnswer(error=message)
        except (OracleError, OSError) as e:
            log.warning(f"{section_type.value}: oracle failed: {e}")
            return OracleAnswer(error=f"Oracle failed: {e}")

        return OracleAnswer(proposals=[boundary] if boundary is not None else None)

    # -------------------------------------------------------------------------
    # Decision
    # -------------------------------------------------------------------------

    def decide(
        self,
        content: str,
        section_type: SectionType,
        answer: OracleAnswer | None = None,
    ) -> SectionDecision:
        """Run Phases A, C and B for one section type. Pure and synchronous."""
        answer = answer or OracleAnswer()
        line_count = len(split_lines(content))
        decision = SectionDecision(section_type=section_type, trail=[DefenseState.NO_PROPOSAL])
        name = section_type.display_name

        if self.oracle is not None:
            decision.trail.append(DefenseState.AWAITING_ORACLE)
        if answer.error:
            decision.warnings.append(answer.error)

        candidates: list[BoundaryInfo] = []

        # Phase A on oracle proposals
        if answer.proposals:
            decision.used_ai = True
            for proposal in answer.proposals:
                validation = self.validator.validate(proposal, section_type, line_count)
                decision.validations.append(validation)
                if not validation.is_valid:
                    continue
                if not proposal.is_complete:
                    # Valid "no boundary" answer
                    decision.trail += [DefenseState.VALIDATED_BY_A, DefenseState.PRESERVED]
                    return self._finish(decision, proposal.confidence)
                candidates.append(proposal)
            decision.trail.append(
                DefenseState.VALIDATED_BY_A if candidates else DefenseState.REJECTED_BY_A
            )

        # Phase C when the oracle was silent or wrong
        if not candidates and self.config.use_heuristic_fallback:
            decision.trail.append(DefenseState.FALLBACK_ATTEMPTED)
            outcome = self.detector.detect_section(section_type, content)
            decision.detections.extend(outcome.results)
            for boundary in outcome.boundaries:
                validation = self.validator.validate(boundary, section_type, line_count)
                decision.validations.append(validation)
                if validation.is_valid:
                    candidates.append(boundary)
            if candidates:
                decision.used_fallback = True
            elif outcome.boundaries:
                decision.trail.append(DefenseState.REJECTED_BY_A)

        if not candidates:
            decision.trail.append(DefenseState.PRESERVED)
            decision.warnings.append(f"{name}: no boundary from oracle or heuristics; preserved")
            return self._finish(decision, 0.0)

        # Phase B on whatever survived
        scores: list[float] = []
        for candidate in candidates:
            verification = self.verifier.verify(
                section_type, content, candidate.start_line, candidate.end_line
            )
            decision.verifications.append(verification)
            if verification.is_valid:
                decision.spans.append(candidate)
                scores.append((candidate.confidence + verification.confidence) / 2)
            else:
                decision.warnings.append(
                    f"{name} lines {candidate.start_line}-{candidate.end_line} "
                    f"failed content verification: {verification.explanation}"
                )

        if not decision.spans:
            decision.trail += [DefenseState.REJECTED_BY_B, DefenseState.PRESERVED]
            return self._finish(decision, 0.0)

        decision.trail += [DefenseState.VERIFIED_BY_B, DefenseState.REMOVED]
        confidence = sum(scores) / len(scores)
        if decision.used_fallback:
            confidence *= self.config.fallback_penalty
            decision.warnings.append(f"{name}: heuristic fallback used instead of the oracle")
        log.info(
            f"{section_type.value}: removing {decision.lines_removed} line(s) "
            f"in {len(decision.spans)} span(s) (confidence={confidence:.2f})"
        )
        return self._finish(decision, confidence)

    def _finish(self, decision: SectionDecision, confidence: float) -> SectionDecision:
        decision.confidence = PhaseConfidence(
            phase=decision.section_type.value,
            confidence=confidence,
            used_ai=decision.used_ai,
            used_fallback=decision.used_fallback,
            warnings=list(decision.warnings),
        )
        return decision

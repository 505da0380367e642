"""
Unit tests for DenialAnalysisService.
"""

from datetime import date
from decimal import Decimal

import pytest

from claimflow.domain.models.claim import ClaimPriority, DenialAnalysis
from claimflow.domain.services.denial_analysis import DenialAnalysisService, RULE_CONFIDENCE


class TestDenialAnalysis:
    """Test cases for rule-based denial analysis."""

    def setup_method(self):
        self.service = DenialAnalysisService()

    @pytest.mark.parametrize("code, priority", [
        ("CO-45", ClaimPriority.MEDIUM),
        ("CO-16", ClaimPriority.HIGH),
        ("CO-22", ClaimPriority.HIGH),
        ("PR-1", ClaimPriority.LOW),
    ])
    def test_known_codes(self, code, priority):
        """Test curated codes map to their priority."""
        analysis = self.service.analyze(code)

        assert analysis.denial_code == code
        assert analysis.priority == priority
        assert analysis.confidence == RULE_CONFIDENCE
        assert analysis.required_documentation

    def test_code_is_normalized(self):
        """Test lookups ignore case and surrounding whitespace."""
        analysis = self.service.analyze("  co-16 ")

        assert analysis.denial_code == "CO-16"
        assert analysis.priority == ClaimPriority.HIGH

    def test_unknown_code_requires_manual_review(self):
        """Test unknown codes fall back to the manual review rule."""
        analysis = self.service.analyze("XX-999")

        assert analysis.reason == "Denial requires manual review"
        assert analysis.priority == ClaimPriority.MEDIUM

    def test_missing_code(self):
        """Test a claim without a denial code still gets a recommendation."""
        analysis = self.service.analyze(None)

        assert analysis.denial_code == ""
        assert analysis.recommended_action

    def test_analysis_dict_round_trip(self):
        """Test cached analyses rebuild to an equal value."""
        analysis = self.service.analyze("CO-45")
        data = analysis.to_dict()

        assert data["priority"] == "medium"
        assert DenialAnalysis.from_dict(data) == analysis


class TestAppealLetter:
    """Test cases for appeal letter rendering."""

    def setup_method(self):
        self.service = DenialAnalysisService()

    def test_first_level_letter(self):
        """Test the letter carries the claim details."""
        letter = self.service.appeal_letter(
            claim_number="CLM-1",
            patient_name="Jane Patient",
            date_of_service=date(2026, 9, 1),
            denial_code="co-16",
            denial_reason="Missing documentation",
            amount=Decimal("250.5"),
            services=["99213", "85025"],
        )

        assert "Re: First-Level Appeal for Claim #CLM-1" in letter
        assert "Patient: Jane Patient" in letter
        assert "Date of Service: 2026-09-01" in letter
        assert "Services: 99213, 85025" in letter
        assert "Amount: $250.50" in letter
        assert "reason code CO-16: Missing documentation" in letter
        assert "We are writing to appeal the denial" in letter

    def test_second_level_letter(self):
        """Test second-level appeals reference the upheld first appeal."""
        letter = self.service.appeal_letter(
            claim_number="CLM-2",
            patient_name=None,
            date_of_service=None,
            denial_code=None,
            denial_reason=None,
            appeal_type="second",
        )

        assert "Re: Second-Level Appeal for Claim #CLM-2" in letter
        assert "first-level appeal of this claim was upheld" in letter
        assert "Patient: Unknown" in letter
        assert "Date of Service: [DATE OF SERVICE]" in letter
        assert "reason code N/A: Not specified" in letter
        assert "Amount:" not in letter

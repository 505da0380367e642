"""Denial analysis service.
Rule-based recommendations for denied claims and template appeal letters.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from claimflow.domain.models.claim import ClaimPriority, DenialAnalysis


RULE_CONFIDENCE = 0.7
DEFAULT_APPEAL_STRATEGY = "Follow standard appeal process per payer guidelines"
APPEAL_LEVELS = {"first": "First-Level", "second": "Second-Level"}


class DenialAnalysisService:
    """
    Domain service producing a recommendation for a claim's denial code.
    Known CARC codes map to curated rules; anything else requires manual review.
    """

    def __init__(self):
        self.rules: Dict[str, Dict[str, Any]] = {
            "CO-45": {
                "reason": "Charge exceeds fee schedule/maximum allowable",
                "recommended_action": "Verify contracted rates and appeal with documentation",
                "priority": ClaimPriority.MEDIUM,
                "required_documentation": ["Contract terms", "Fee schedule"],
            },
            "CO-16": {
                "reason": "Claim lacks required information or documentation",
                "recommended_action": "Gather medical records and supporting documentation, then resubmit",
                "priority": ClaimPriority.HIGH,
                "required_documentation": ["Medical records", "Physician notes", "Test results"],
            },
            "CO-22": {
                "reason": "Duplicate claim submission",
                "recommended_action": "Verify if claim was previously processed and void duplicate",
                "priority": ClaimPriority.HIGH,
                "required_documentation": ["Previous claim confirmation"],
            },
            "PR-1": {
                "reason": "Deductible amount - patient responsibility",
                "recommended_action": "Bill patient for deductible amount",
                "priority": ClaimPriority.LOW,
                "required_documentation": ["EOB", "Patient statement"],
            },
        }
        self.default_rule: Dict[str, Any] = {
            "reason": "Denial requires manual review",
            "recommended_action": "Review EOB and payer policy, contact payer if needed",
            "priority": ClaimPriority.MEDIUM,
            "required_documentation": ["EOB", "Claim details"],
        }

    @staticmethod
    def normalize_code(code: Optional[str]) -> str:
        """Normalize a denial code for lookups (``co-45 `` -> ``CO-45``)."""
        if not code:
            return ""
        return code.strip().upper()

    def analyze(self, denial_code: Optional[str]) -> DenialAnalysis:
        """
        Analyze a denial code.

        Args:
            denial_code: Raw denial code from the remittance

        Returns:
            DenialAnalysis with the recommended next step
        """
        code = self.normalize_code(denial_code)
        rule = self.rules.get(code, self.default_rule)

        return DenialAnalysis(
            denial_code=code,
            reason=rule["reason"],
            recommended_action=rule["recommended_action"],
            priority=rule["priority"],
            confidence=RULE_CONFIDENCE,
            required_documentation=list(rule["required_documentation"]),
            appeal_strategy=DEFAULT_APPEAL_STRATEGY,
        )

    def appeal_letter(
        self,
        claim_number: str,
        patient_name: Optional[str],
        date_of_service: Optional[date],
        denial_code: Optional[str],
        denial_reason: Optional[str],
        amount: Union[Decimal, float, None] = None,
        services: Optional[List[str]] = None,
        appeal_type: str = "first",
    ) -> str:
        """Render the template appeal letter for a claim (first or second level)."""
        service_date = date_of_service.isoformat() if date_of_service else "[DATE OF SERVICE]"
        lines = [
            "[DATE]",
            "",
            "[PAYER NAME]",
            "[PAYER ADDRESS]",
            "",
            f"Re: {APPEAL_LEVELS.get(appeal_type, APPEAL_LEVELS['first'])} Appeal for Claim #{claim_number}",
            f"Patient: {patient_name or 'Unknown'}",
            f"Date of Service: {service_date}",
        ]
        if services:
            lines.append(f"Services: {', '.join(services)}")
        if amount is not None:
            lines.append(f"Amount: ${Decimal(str(amount)):.2f}")
        opening = (
            "Our first-level appeal of this claim was upheld. We are writing to request a second-level review of the denial"
            if appeal_type == "second"
            else "We are writing to appeal the denial"
        )
        lines += [
            "",
            "Dear Appeals Department,",
            "",
            f"{opening} of the above-referenced claim, which was denied "
            f"with reason code {self.normalize_code(denial_code) or 'N/A'}: {denial_reason or 'Not specified'}.",
            "",
            "We respectfully request reconsideration of this claim based on the following:",
            "",
            "1. Medical Necessity: The services provided were medically necessary and appropriate "
            "for the patient's condition.",
            "",
            "2. Documentation: We have attached all required supporting documentation including "
            "medical records and physician notes.",
            "",
            "3. Policy Compliance: The services rendered are consistent with the terms of our "
            "contract and your coverage policies.",
            "",
            "We request that you review this claim and process payment for the services rendered. "
            "If you require any additional information, please contact our office immediately.",
            "",
            "Thank you for your prompt attention to this matter.",
            "",
            "Sincerely,",
            "",
            "[PROVIDER NAME]",
            "[CONTACT INFORMATION]",
            "",
            "Attachments: Medical Records, Physician Notes, Supporting Documentation",
        ]
        return "\n".join(lines)

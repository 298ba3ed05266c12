"""
Domain model for health plan form data.

Form data is a tagged union: UnlockedHealthPlanFormData (status DRAFT) while a
state user is still editing, LockedHealthPlanFormData (status SUBMITTED) once
submitted. Values are frozen dataclasses; sequences are tuples. Enum-like fields
hold the proto enum name without its prefix (e.g. "CONTRACT_AND_RATES").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class SubmissionDocument:
    name: str
    s3_url: str
    sha256: Optional[str] = None
    document_categories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StateContact:
    name: Optional[str] = None
    title_role: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ActuaryContact:
    name: Optional[str] = None
    title_role: Optional[str] = None
    email: Optional[str] = None
    actuarial_firm: Optional[str] = None
    actuarial_firm_other: Optional[str] = None


@dataclass(frozen=True)
class ModifiedProvisions:
    """Yes/no answers for an amended contract; None means the question was not answered."""

    modified_benefits_provided: Optional[bool] = None
    modified_geo_area_served: Optional[bool] = None
    modified_medicaid_beneficiaries: Optional[bool] = None
    modified_risk_sharing_strategy: Optional[bool] = None
    modified_incentive_arrangements: Optional[bool] = None
    modified_withold_agreements: Optional[bool] = None
    modified_state_directed_payments: Optional[bool] = None
    modified_pass_through_payments: Optional[bool] = None
    modified_payments_for_mental_disease_institutions: Optional[bool] = None
    modified_medical_loss_ratio_standards: Optional[bool] = None
    modified_other_financial_payment_incentive: Optional[bool] = None
    modified_enrollment_process: Optional[bool] = None
    modified_grevience_and_appeal: Optional[bool] = None
    modified_network_adequacy_standards: Optional[bool] = None
    modified_length_of_contract: Optional[bool] = None
    modified_non_risk_payment_arrangements: Optional[bool] = None
    in_lieu_services_and_settings: Optional[bool] = None


@dataclass(frozen=True)
class ContractAmendmentInfo:
    modified_provisions: ModifiedProvisions


@dataclass(frozen=True)
class RateAmendmentInfo:
    effective_date_start: Optional[date] = None
    effective_date_end: Optional[date] = None


@dataclass(frozen=True)
class SharedRateCertDisplay:
    package_id: Optional[str] = None
    package_name: Optional[str] = None


@dataclass(frozen=True)
class RateInfo:
    id: Optional[str] = None
    rate_type: Optional[str] = None
    rate_capitation_type: Optional[str] = None
    rate_documents: Tuple[SubmissionDocument, ...] = ()
    supporting_documents: Tuple[SubmissionDocument, ...] = ()
    rate_date_start: Optional[date] = None
    rate_date_end: Optional[date] = None
    rate_date_certified: Optional[date] = None
    rate_amendment_info: Optional[RateAmendmentInfo] = None
    rate_program_ids: Tuple[str, ...] = ()
    rate_certification_name: Optional[str] = None
    actuary_contacts: Tuple[ActuaryContact, ...] = ()
    actuary_communication_preference: Optional[str] = None
    packages_with_shared_rate_certs: Tuple[SharedRateCertDisplay, ...] = ()


@dataclass(frozen=True)
class _FormDataFields:
    id: str
    state_code: Optional[str] = None
    state_number: int = 0
    created_at: Optional[date] = None
    updated_at: Optional[datetime] = None
    submission_type: Optional[str] = None
    submission_description: Optional[str] = None
    program_ids: Tuple[str, ...] = ()
    population_covered: Optional[str] = None
    risk_based_contract: Optional[bool] = None
    state_contacts: Tuple[StateContact, ...] = ()
    documents: Tuple[SubmissionDocument, ...] = ()
    contract_type: Optional[str] = None
    contract_execution_status: Optional[str] = None
    contract_date_start: Optional[date] = None
    contract_date_end: Optional[date] = None
    contract_documents: Tuple[SubmissionDocument, ...] = ()
    managed_care_entities: Tuple[str, ...] = ()
    federal_authorities: Tuple[str, ...] = ()
    contract_amendment_info: Optional[ContractAmendmentInfo] = None
    statutory_regulatory_attestation: Optional[bool] = None
    statutory_regulatory_attestation_description: Optional[str] = None
    rate_infos: Tuple[RateInfo, ...] = ()
    addtl_actuary_contacts: Tuple[ActuaryContact, ...] = ()
    addtl_actuary_communication_preference: Optional[str] = None


@dataclass(frozen=True)
class UnlockedHealthPlanFormData(_FormDataFields):
    """Draft (or unlocked) form data; any field may still be missing."""

    status: str = field(default="DRAFT", init=False)


@dataclass(frozen=True)
class LockedHealthPlanFormData(_FormDataFields):
    """Submitted form data. A submission always carries its submission time, type and state."""

    submitted_at: Optional[datetime] = None
    status: str = field(default="SUBMITTED", init=False)

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("submitted_at", "submission_type", "state_code")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"submitted form data {self.id} is missing {', '.join(missing)}")


HealthPlanFormData = Union[UnlockedHealthPlanFormData, LockedHealthPlanFormData]


def is_locked(form_data: HealthPlanFormData) -> bool:
    if isinstance(form_data, LockedHealthPlanFormData):
        return True
    if isinstance(form_data, UnlockedHealthPlanFormData):
        return False
    raise TypeError(f"not health plan form data: {type(form_data).__name__}")


def is_contract_and_rates(form_data: HealthPlanFormData) -> bool:
    return form_data.submission_type == "CONTRACT_AND_RATES"

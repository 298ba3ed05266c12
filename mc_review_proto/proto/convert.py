"""
Conversions between HealthPlanFormData messages and the domain model.

to_domain / to_proto are strict mappings at the current proto version.
read_form_data / write_form_data are the single-item read and write paths used by
callers outside the batch driver: reads are migrated to the current version before
conversion, and any DecodeError or MigrationStepError propagates to the caller.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.errors import DecodeError, EncodeError
from ..migrations.runner import MigrationRunner
from ..migrations.steps import CURRENT_PROTO_VERSION
from . import domain as d
from .codec import decode, encode
from .schema import (
    MODIFIED_PROVISION_KEYS,
    PROTO_NAME,
    HealthPlanFormData,
    enum_descriptor,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _enum_prefix(enum_name: str) -> str:
    """SUBMISSION_TYPE_ from SUBMISSION_TYPE_UNSPECIFIED."""
    default = enum_descriptor(enum_name).values_by_number[0].name
    return default[: default.rfind("_") + 1]


def _enum_to_domain(enum_name: str, number: int) -> Optional[str]:
    if not number:
        return None
    value = enum_descriptor(enum_name).values_by_number.get(number)
    if value is None:
        logger.info("Dropping unknown %s value %s", enum_name, number)
        return None
    return value.name[len(_enum_prefix(enum_name)):]


def _enum_list_to_domain(enum_name: str, numbers: Iterable[int]) -> Tuple[str, ...]:
    out = []
    for number in numbers:
        converted = _enum_to_domain(enum_name, number)
        if converted:
            out.append(converted)
    return tuple(out)


def _enum_to_proto(enum_name: str, value: Optional[str]) -> int:
    if not value:
        return 0
    full = _enum_prefix(enum_name) + value
    found = enum_descriptor(enum_name).values_by_name.get(full)
    if found is None:
        raise EncodeError(f"{value!r} is not a valid {enum_name}")
    return found.number


def _optional_str(value: str) -> Optional[str]:
    return value or None


def _date_to_domain(parent, name: str) -> Optional[date]:
    if not parent.HasField(name):
        return None
    proto_date = getattr(parent, name)
    try:
        return date(proto_date.year, proto_date.month, proto_date.day)
    except ValueError:
        logger.info(
            "Incomplete proto date %s: year=%s month=%s day=%s",
            name,
            proto_date.year,
            proto_date.month,
            proto_date.day,
        )
        return None


def _set_date(parent, name: str, value: Optional[date]) -> None:
    if value is None:
        return
    target = getattr(parent, name)
    target.year = value.year
    target.month = value.month
    target.day = value.day


def _timestamp_to_domain(parent, name: str) -> Optional[datetime]:
    if not parent.HasField(name):
        return None
    ts = getattr(parent, name)
    if not ts.seconds:
        return None
    try:
        return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)
    except (OverflowError, ValueError):
        logger.info("Out of range proto timestamp %s: seconds=%s nanos=%s", name, ts.seconds, ts.nanos)
        return None


def _set_timestamp(parent, name: str, value: Optional[datetime]) -> None:
    if value is None:
        return
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    target = getattr(parent, name)
    target.seconds = delta.days * 86400 + delta.seconds
    target.nanos = delta.microseconds * 1000


def _documents_to_domain(docs) -> Tuple[d.SubmissionDocument, ...]:
    return tuple(
        d.SubmissionDocument(
            name=doc.name,
            s3_url=doc.s3_url,
            sha256=_optional_str(doc.sha256),
            document_categories=_enum_list_to_domain("DocumentCategory", doc.document_categories),
        )
        for doc in docs
    )


def _add_documents(target, docs: Iterable[d.SubmissionDocument]) -> None:
    for doc in docs:
        item = target.add(name=doc.name, s3_url=doc.s3_url, sha256=doc.sha256 or "")
        item.document_categories.extend(_enum_to_proto("DocumentCategory", c) for c in doc.document_categories)


def _actuaries_to_domain(contacts) -> Tuple[d.ActuaryContact, ...]:
    return tuple(
        d.ActuaryContact(
            name=_optional_str(c.contact.name),
            title_role=_optional_str(c.contact.title_role),
            email=_optional_str(c.contact.email),
            actuarial_firm=_enum_to_domain("ActuarialFirmType", c.actuarial_firm_type),
            actuarial_firm_other=_optional_str(c.actuarial_firm_other),
        )
        for c in contacts
    )


def _add_actuaries(target, contacts: Iterable[d.ActuaryContact]) -> None:
    for c in contacts:
        item = target.add(
            actuarial_firm_type=_enum_to_proto("ActuarialFirmType", c.actuarial_firm),
            actuarial_firm_other=c.actuarial_firm_other or "",
        )
        item.contact.name = c.name or ""
        item.contact.title_role = c.title_role or ""
        item.contact.email = c.email or ""


def _contract_amendment_to_domain(contract_info) -> Optional[d.ContractAmendmentInfo]:
    # amendment info and modified provisions are one and the same in the domain
    if not contract_info.HasField("contract_amendment_info"):
        return None
    amendment = contract_info.contract_amendment_info
    if not amendment.HasField("modified_provisions"):
        return None
    provisions = amendment.modified_provisions
    answers = {
        key: getattr(provisions, key) if provisions.HasField(key) else None for key in MODIFIED_PROVISION_KEYS
    }
    return d.ContractAmendmentInfo(modified_provisions=d.ModifiedProvisions(**answers))


def _rate_to_domain(rate) -> d.RateInfo:
    amendment = None
    if rate.HasField("rate_amendment_info"):
        amendment = d.RateAmendmentInfo(
            effective_date_start=_date_to_domain(rate.rate_amendment_info, "effective_date_start"),
            effective_date_end=_date_to_domain(rate.rate_amendment_info, "effective_date_end"),
        )
    return d.RateInfo(
        id=_optional_str(rate.id),
        rate_type=_enum_to_domain("RateType", rate.rate_type),
        rate_capitation_type=_enum_to_domain("RateCapitationType", rate.rate_capitation_type),
        rate_documents=_documents_to_domain(rate.rate_documents),
        supporting_documents=_documents_to_domain(rate.supporting_documents),
        rate_date_start=_date_to_domain(rate, "rate_date_start"),
        rate_date_end=_date_to_domain(rate, "rate_date_end"),
        rate_date_certified=_date_to_domain(rate, "rate_date_certified"),
        rate_amendment_info=amendment,
        rate_program_ids=tuple(rate.rate_program_ids),
        rate_certification_name=_optional_str(rate.rate_certification_name),
        actuary_contacts=_actuaries_to_domain(rate.actuary_contacts),
        actuary_communication_preference=_enum_to_domain(
            "ActuaryCommunicationType", rate.actuary_communication_preference
        ),
        packages_with_shared_rate_certs=tuple(
            d.SharedRateCertDisplay(
                package_id=_optional_str(p.package_id),
                package_name=_optional_str(p.package_name),
            )
            for p in rate.packages_with_shared_rate_certs
        ),
    )


def _common_fields(proto: HealthPlanFormData) -> Dict[str, Any]:
    contract = proto.contract_info
    return dict(
        id=proto.id,
        state_code=_enum_to_domain("StateCode", proto.state_code),
        state_number=proto.state_number,
        created_at=_date_to_domain(proto, "created_at"),
        updated_at=_timestamp_to_domain(proto, "updated_at"),
        submission_type=_enum_to_domain("SubmissionType", proto.submission_type),
        submission_description=_optional_str(proto.submission_description),
        program_ids=tuple(proto.program_ids),
        population_covered=_enum_to_domain("PopulationCovered", proto.population_covered),
        risk_based_contract=proto.risk_based_contract if proto.HasField("risk_based_contract") else None,
        state_contacts=tuple(
            d.StateContact(
                name=_optional_str(c.name),
                title_role=_optional_str(c.title_role),
                email=_optional_str(c.email),
            )
            for c in proto.state_contacts
        ),
        documents=_documents_to_domain(proto.documents),
        contract_type=_enum_to_domain("ContractType", contract.contract_type),
        contract_execution_status=_enum_to_domain("ContractExecutionStatus", contract.contract_execution_status),
        contract_date_start=_date_to_domain(contract, "contract_date_start"),
        contract_date_end=_date_to_domain(contract, "contract_date_end"),
        contract_documents=_documents_to_domain(contract.contract_documents),
        managed_care_entities=_enum_list_to_domain("ManagedCareEntity", contract.managed_care_entities),
        federal_authorities=_enum_list_to_domain("FederalAuthority", contract.federal_authorities),
        contract_amendment_info=_contract_amendment_to_domain(contract),
        statutory_regulatory_attestation=(
            contract.statutory_regulatory_attestation
            if contract.HasField("statutory_regulatory_attestation")
            else None
        ),
        statutory_regulatory_attestation_description=_optional_str(
            contract.statutory_regulatory_attestation_description
        ),
        rate_infos=tuple(_rate_to_domain(r) for r in proto.rate_infos),
        addtl_actuary_contacts=_actuaries_to_domain(proto.addtl_actuary_contacts),
        addtl_actuary_communication_preference=_enum_to_domain(
            "ActuaryCommunicationType", proto.addtl_actuary_communication_preference
        ),
    )


def to_domain(proto: HealthPlanFormData) -> d.HealthPlanFormData:
    """
    Map a current-version message to UnlockedHealthPlanFormData or LockedHealthPlanFormData
    by its status. Raises DecodeError for a missing or unknown status, or a submitted
    package missing fields every submission carries.
    """
    fields = _common_fields(proto)
    if proto.status == "DRAFT":
        return d.UnlockedHealthPlanFormData(**fields)
    if proto.status == "SUBMITTED":
        try:
            return d.LockedHealthPlanFormData(
                submitted_at=_timestamp_to_domain(proto, "submitted_at"),
                **fields,
            )
        except ValueError as e:
            logger.warning("Attempting to parse submitted form data %s failed: %s", proto.id, e)
            raise DecodeError(str(e)) from e
    raise DecodeError(f"Unknown or missing status {proto.status!r} on form data {proto.id!r}. Cannot decode.")


def _add_rate(target, rate: d.RateInfo) -> None:
    item = target.add(
        id=rate.id or str(uuid.uuid4()),
        rate_type=_enum_to_proto("RateType", rate.rate_type),
        rate_capitation_type=_enum_to_proto("RateCapitationType", rate.rate_capitation_type),
        rate_certification_name=rate.rate_certification_name or "",
        actuary_communication_preference=_enum_to_proto(
            "ActuaryCommunicationType", rate.actuary_communication_preference
        ),
    )
    _add_documents(item.rate_documents, rate.rate_documents)
    _add_documents(item.supporting_documents, rate.supporting_documents)
    _set_date(item, "rate_date_start", rate.rate_date_start)
    _set_date(item, "rate_date_end", rate.rate_date_end)
    _set_date(item, "rate_date_certified", rate.rate_date_certified)
    if rate.rate_amendment_info is not None:
        item.rate_amendment_info.SetInParent()
        _set_date(item.rate_amendment_info, "effective_date_start", rate.rate_amendment_info.effective_date_start)
        _set_date(item.rate_amendment_info, "effective_date_end", rate.rate_amendment_info.effective_date_end)
    item.rate_program_ids.extend(rate.rate_program_ids)
    _add_actuaries(item.actuary_contacts, rate.actuary_contacts)
    for shared in rate.packages_with_shared_rate_certs:
        item.packages_with_shared_rate_certs.add(
            package_id=shared.package_id or "",
            package_name=shared.package_name or "",
        )


def to_proto(form_data: d.HealthPlanFormData) -> HealthPlanFormData:
    """
    Build a current-version message from domain form data. Rates without an id
    get a freshly generated one.
    """
    # TypeError for anything outside the union
    locked = d.is_locked(form_data)
    proto = HealthPlanFormData(
        proto_name=PROTO_NAME,
        proto_version=CURRENT_PROTO_VERSION,
        id=form_data.id,
        status=form_data.status,
        state_code=_enum_to_proto("StateCode", form_data.state_code),
        state_number=form_data.state_number,
        submission_type=_enum_to_proto("SubmissionType", form_data.submission_type),
        submission_description=form_data.submission_description or "",
        population_covered=_enum_to_proto("PopulationCovered", form_data.population_covered),
        addtl_actuary_communication_preference=_enum_to_proto(
            "ActuaryCommunicationType", form_data.addtl_actuary_communication_preference
        ),
    )
    if locked:
        _set_timestamp(proto, "submitted_at", form_data.submitted_at)
    _set_date(proto, "created_at", form_data.created_at)
    _set_timestamp(proto, "updated_at", form_data.updated_at)
    if form_data.risk_based_contract is not None:
        proto.risk_based_contract = form_data.risk_based_contract
    proto.program_ids.extend(form_data.program_ids)
    for contact in form_data.state_contacts:
        proto.state_contacts.add(
            name=contact.name or "",
            title_role=contact.title_role or "",
            email=contact.email or "",
        )
    _add_documents(proto.documents, form_data.documents)
    _add_actuaries(proto.addtl_actuary_contacts, form_data.addtl_actuary_contacts)

    contract = proto.contract_info
    contract.SetInParent()
    contract.contract_type = _enum_to_proto("ContractType", form_data.contract_type)
    contract.contract_execution_status = _enum_to_proto(
        "ContractExecutionStatus", form_data.contract_execution_status
    )
    _set_date(contract, "contract_date_start", form_data.contract_date_start)
    _set_date(contract, "contract_date_end", form_data.contract_date_end)
    contract.managed_care_entities.extend(
        _enum_to_proto("ManagedCareEntity", v) for v in form_data.managed_care_entities
    )
    contract.federal_authorities.extend(_enum_to_proto("FederalAuthority", v) for v in form_data.federal_authorities)
    _add_documents(contract.contract_documents, form_data.contract_documents)
    if form_data.statutory_regulatory_attestation is not None:
        contract.statutory_regulatory_attestation = form_data.statutory_regulatory_attestation
    contract.statutory_regulatory_attestation_description = (
        form_data.statutory_regulatory_attestation_description or ""
    )
    if form_data.contract_amendment_info is not None:
        provisions = contract.contract_amendment_info.modified_provisions
        provisions.SetInParent()
        for key in MODIFIED_PROVISION_KEYS:
            answer = getattr(form_data.contract_amendment_info.modified_provisions, key)
            if answer is not None:
                setattr(provisions, key, answer)

    for rate in form_data.rate_infos:
        _add_rate(proto.rate_infos, rate)
    return proto


def read_form_data(data: bytes, *, blob_id: Optional[str] = None) -> d.HealthPlanFormData:
    """Decode, migrate to the current version, and convert. Errors propagate."""
    result = MigrationRunner().run(decode(data), blob_id=blob_id)
    return to_domain(result.proto)


def write_form_data(form_data: d.HealthPlanFormData) -> bytes:
    """Encode domain form data as current-version bytes."""
    return encode(to_proto(form_data))


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def to_jsonable(form_data: d.HealthPlanFormData) -> Dict[str, Any]:
    """Plain dict (dates as ISO strings) for JSON output."""
    return _jsonable(dataclasses.asdict(form_data))


__all__: List[str] = [
    "read_form_data",
    "to_domain",
    "to_jsonable",
    "to_proto",
    "write_form_data",
]

"""
Wire schema for persisted health plan form data (package mcreviewproto).

The schema is declared here as data and registered with the protobuf runtime at
import time, so no generated _pb2 module or protoc step is needed. Field numbers
and types are those of the persisted blobs and must never be renumbered; new
fields get new numbers.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf import timestamp_pb2  # noqa: F401  registers google/protobuf/timestamp.proto

PACKAGE = "mcreviewproto"
FILE_NAME = "mcreviewproto/health_plan_form_data.proto"
PROTO_NAME = "STATE_SUBMISSION"

_F = descriptor_pb2.FieldDescriptorProto

# (field name, number, type, type name or None, repeated, presence-tracked)
FieldSpec = Tuple[str, int, int, Optional[str], bool, bool]

_STATE_CODES = [
    "AS", "AK", "AL", "AR", "AZ", "CA", "CO", "CT", "DC", "DE", "FL", "GA", "HI", "IA",
    "ID", "IL", "IN", "KS", "LA", "MA", "MD", "ME", "MI", "MN", "MO", "MS", "MT", "NC",
    "ND", "NE", "NH", "NJ", "NM", "NV", "NY", "OH", "OK", "OR", "PA", "PR", "RI", "SC",
    "SD", "TN", "TX", "UT", "VA", "VT", "WA", "WI", "WV", "WY", "KY",
]

ENUMS: Dict[str, List[Tuple[str, int]]] = {
    "SubmissionType": [
        ("SUBMISSION_TYPE_UNSPECIFIED", 0),
        ("SUBMISSION_TYPE_CONTRACT_ONLY", 1),
        ("SUBMISSION_TYPE_CONTRACT_AND_RATES", 3),
    ],
    "SubmissionStatus": [
        ("SUBMISSION_STATUS_UNSPECIFIED", 0),
        ("SUBMISSION_STATUS_DRAFT", 1),
        ("SUBMISSION_STATUS_SUBMITTED", 2),
    ],
    "PopulationCovered": [
        ("POPULATION_COVERED_UNSPECIFIED", 0),
        ("POPULATION_COVERED_MEDICAID", 1),
        ("POPULATION_COVERED_CHIP", 2),
        ("POPULATION_COVERED_MEDICAID_AND_CHIP", 3),
    ],
    "AmendedItem": [
        ("AMENDED_ITEM_UNSPECIFIED", 0),
        ("AMENDED_ITEM_BENEFITS_PROVIDED", 1),
        ("AMENDED_ITEM_CAPITATION_RATES", 2),
        ("AMENDED_ITEM_ENCOUNTER_DATA", 3),
        ("AMENDED_ITEM_ENROLLEE_ACCESS", 4),
        ("AMENDED_ITEM_ENROLLMENT_PROCESS", 5),
        ("AMENDED_ITEM_FINANCIAL_INCENTIVES", 6),
        ("AMENDED_ITEM_GEO_AREA_SERVED", 7),
        ("AMENDED_ITEM_GRIEVANCES_AND_APPEALS_SYSTEM", 8),
        ("AMENDED_ITEM_LENGTH_OF_CONTRACT_PERIOD", 9),
        ("AMENDED_ITEM_NON_RISK_PAYMENT", 10),
        ("AMENDED_ITEM_PROGRAM_INTEGRITY", 11),
        ("AMENDED_ITEM_QUALITY_STANDARDS", 12),
        ("AMENDED_ITEM_RISK_SHARING_MECHANISM", 13),
        ("AMENDED_ITEM_OTHER", 14),
    ],
    "CapitationRateAmendmentReason": [
        ("CAPITATION_RATE_AMENDMENT_REASON_UNSPECIFIED", 0),
        ("CAPITATION_RATE_AMENDMENT_REASON_ANNUAL", 1),
        ("CAPITATION_RATE_AMENDMENT_REASON_MIDYEAR", 2),
        ("CAPITATION_RATE_AMENDMENT_REASON_OTHER", 3),
    ],
    "ContractType": [
        ("CONTRACT_TYPE_UNSPECIFIED", 0),
        ("CONTRACT_TYPE_BASE", 1),
        ("CONTRACT_TYPE_AMENDMENT", 2),
    ],
    "ContractExecutionStatus": [
        ("CONTRACT_EXECUTION_STATUS_UNSPECIFIED", 0),
        ("CONTRACT_EXECUTION_STATUS_EXECUTED", 1),
        ("CONTRACT_EXECUTION_STATUS_UNEXECUTED", 2),
    ],
    "FederalAuthority": [
        ("FEDERAL_AUTHORITY_UNSPECIFIED", 0),
        ("FEDERAL_AUTHORITY_STATE_PLAN", 1),
        ("FEDERAL_AUTHORITY_WAIVER_1915B", 2),
        ("FEDERAL_AUTHORITY_WAIVER_1115", 3),
        ("FEDERAL_AUTHORITY_VOLUNTARY", 4),
        ("FEDERAL_AUTHORITY_BENCHMARK", 5),
        ("FEDERAL_AUTHORITY_TITLE_XXI", 6),
    ],
    "ManagedCareEntity": [
        ("MANAGED_CARE_ENTITY_UNSPECIFIED", 0),
        ("MANAGED_CARE_ENTITY_MCO", 1),
        ("MANAGED_CARE_ENTITY_PIHP", 2),
        ("MANAGED_CARE_ENTITY_PAHP", 3),
        ("MANAGED_CARE_ENTITY_PCCM", 4),
    ],
    "RateType": [
        ("RATE_TYPE_UNSPECIFIED", 0),
        ("RATE_TYPE_NEW", 1),
        ("RATE_TYPE_AMENDMENT", 2),
    ],
    "RateCapitationType": [
        ("RATE_CAPITATION_TYPE_UNSPECIFIED", 0),
        ("RATE_CAPITATION_TYPE_RATE_CELL", 1),
        ("RATE_CAPITATION_TYPE_RATE_RANGE", 2),
    ],
    "ActuaryCommunicationType": [
        ("ACTUARY_COMMUNICATION_TYPE_UNSPECIFIED", 0),
        ("ACTUARY_COMMUNICATION_TYPE_OACT_TO_ACTUARY", 1),
        ("ACTUARY_COMMUNICATION_TYPE_OACT_TO_STATE", 2),
    ],
    "ActuarialFirmType": [
        ("ACTUARIAL_FIRM_TYPE_UNSPECIFIED", 0),
        ("ACTUARIAL_FIRM_TYPE_MERCER", 1),
        ("ACTUARIAL_FIRM_TYPE_MILLIMAN", 2),
        ("ACTUARIAL_FIRM_TYPE_OPTUMAS", 3),
        ("ACTUARIAL_FIRM_TYPE_GUIDEHOUSE", 4),
        ("ACTUARIAL_FIRM_TYPE_DELOITTE", 5),
        ("ACTUARIAL_FIRM_TYPE_STATE_IN_HOUSE", 6),
        ("ACTUARIAL_FIRM_TYPE_OTHER", 7),
    ],
    "DocumentCategory": [
        ("DOCUMENT_CATEGORY_UNSPECIFIED", 0),
        ("DOCUMENT_CATEGORY_CONTRACT", 1),
        ("DOCUMENT_CATEGORY_RATES", 2),
        ("DOCUMENT_CATEGORY_CONTRACT_RELATED", 3),
        ("DOCUMENT_CATEGORY_RATES_RELATED", 4),
    ],
    "StateCode": [("STATE_CODE_UNSPECIFIED", 0)]
    + [(f"STATE_CODE_{code}", i) for i, code in enumerate(_STATE_CODES, start=1)],
}

MODIFIED_PROVISION_KEYS = (
    "modified_benefits_provided",
    "modified_geo_area_served",
    "modified_medicaid_beneficiaries",
    "modified_risk_sharing_strategy",
    "modified_incentive_arrangements",
    "modified_withold_agreements",
    "modified_state_directed_payments",
    "modified_pass_through_payments",
    "modified_payments_for_mental_disease_institutions",
    "modified_medical_loss_ratio_standards",
    "modified_other_financial_payment_incentive",
    "modified_enrollment_process",
    "modified_grevience_and_appeal",
    "modified_network_adequacy_standards",
    "modified_length_of_contract",
    "modified_non_risk_payment_arrangements",
    "in_lieu_services_and_settings",
)


def _scalar(name: str, number: int, ftype: int, *, repeated: bool = False, optional: bool = False) -> FieldSpec:
    return (name, number, ftype, None, repeated, optional)


def _ref(name: str, number: int, ftype: int, type_name: str, *, repeated: bool = False) -> FieldSpec:
    return (name, number, ftype, type_name, repeated, False)


def _msg(name: str, number: int, type_name: str, *, repeated: bool = False) -> FieldSpec:
    return _ref(name, number, _F.TYPE_MESSAGE, type_name, repeated=repeated)


def _enum(name: str, number: int, type_name: str, *, repeated: bool = False) -> FieldSpec:
    return _ref(name, number, _F.TYPE_ENUM, type_name, repeated=repeated)


_STR, _I32, _BOOL = _F.TYPE_STRING, _F.TYPE_INT32, _F.TYPE_BOOL

# Dotted names are nested messages. Parents must be listed before their children.
MESSAGES: Dict[str, Sequence[FieldSpec]] = {
    "Date": [
        _scalar("year", 1, _I32),
        _scalar("month", 2, _I32),
        _scalar("day", 3, _I32),
    ],
    "Contact": [
        _scalar("name", 1, _STR),
        _scalar("title_role", 2, _STR),
        _scalar("email", 3, _STR),
        _scalar("id", 4, _STR),
    ],
    "ActuaryContact": [
        _msg("contact", 1, "Contact"),
        _enum("actuarial_firm_type", 2, "ActuarialFirmType"),
        _scalar("actuarial_firm_other", 3, _STR),
    ],
    "Document": [
        _scalar("name", 1, _STR),
        _scalar("s3_url", 2, _STR),
        _enum("document_categories", 3, "DocumentCategory", repeated=True),
        _scalar("sha256", 4, _STR),
    ],
    "SharedRateCertDisplay": [
        _scalar("package_id", 1, _STR),
        _scalar("package_name", 2, _STR),
    ],
    "ContractInfo": [
        _enum("contract_type", 1, "ContractType"),
        _msg("contract_date_start", 2, "Date"),
        _msg("contract_date_end", 3, "Date"),
        _enum("managed_care_entities", 4, "ManagedCareEntity", repeated=True),
        _enum("federal_authorities", 5, "FederalAuthority", repeated=True),
        _msg("contract_documents", 6, "Document", repeated=True),
        _enum("contract_execution_status", 7, "ContractExecutionStatus"),
        _scalar("statutory_regulatory_attestation", 8, _BOOL, optional=True),
        _scalar("statutory_regulatory_attestation_description", 9, _STR),
        _msg("contract_amendment_info", 50, "ContractInfo.ContractAmendmentInfo"),
    ],
    "ContractInfo.ContractAmendmentInfo": [
        _enum("amendable_items", 1, "AmendedItem", repeated=True),
        _scalar("other_amendable_item", 2, _STR),
        _msg(
            "capitation_rates_amended_info",
            3,
            "ContractInfo.ContractAmendmentInfo.CapitationRatesAmendedInfo",
        ),
        _msg("modified_provisions", 4, "ContractInfo.ContractAmendmentInfo.ModifiedProvisions"),
    ],
    "ContractInfo.ContractAmendmentInfo.CapitationRatesAmendedInfo": [
        _enum("reason", 1, "CapitationRateAmendmentReason"),
        _scalar("other_reason", 2, _STR),
    ],
    "ContractInfo.ContractAmendmentInfo.ModifiedProvisions": [
        _scalar(key, i, _BOOL, optional=True) for i, key in enumerate(MODIFIED_PROVISION_KEYS, start=1)
    ],
    "RateInfo": [
        _scalar("id", 1, _STR),
        _enum("rate_type", 2, "RateType"),
        _msg("rate_date_start", 3, "Date"),
        _msg("rate_date_end", 4, "Date"),
        _msg("rate_date_certified", 5, "Date"),
        _msg("actuary_contacts", 6, "ActuaryContact", repeated=True),
        _enum("actuary_communication_preference", 7, "ActuaryCommunicationType"),
        _msg("rate_documents", 8, "Document", repeated=True),
        _enum("rate_capitation_type", 9, "RateCapitationType"),
        _scalar("rate_program_ids", 10, _STR, repeated=True),
        _scalar("rate_certification_name", 11, _STR),
        _msg("supporting_documents", 12, "Document", repeated=True),
        _msg("packages_with_shared_rate_certs", 13, "SharedRateCertDisplay", repeated=True),
        _msg("rate_amendment_info", 50, "RateInfo.RateAmendmentInfo"),
    ],
    "RateInfo.RateAmendmentInfo": [
        _msg("effective_date_start", 1, "Date"),
        _msg("effective_date_end", 2, "Date"),
    ],
    "HealthPlanFormData": [
        _scalar("proto_name", 1, _STR),
        _scalar("proto_version", 2, _I32),
        _scalar("id", 3, _STR),
        _scalar("status", 4, _STR),
        _msg("created_at", 5, "Date"),
        _msg("updated_at", 6, ".google.protobuf.Timestamp"),
        _msg("submitted_at", 7, ".google.protobuf.Timestamp"),
        _enum("submission_status", 8, "SubmissionStatus"),
        _enum("state_code", 9, "StateCode"),
        _scalar("state_number", 10, _I32),
        _scalar("program_ids", 11, _STR, repeated=True),
        _enum("submission_type", 12, "SubmissionType"),
        _scalar("submission_description", 13, _STR),
        _msg("state_contacts", 14, "Contact", repeated=True),
        _msg("contract_info", 15, "ContractInfo"),
        _msg("documents", 16, "Document", repeated=True),
        _msg("addtl_actuary_contacts", 17, "ActuaryContact", repeated=True),
        _enum("addtl_actuary_communication_preference", 18, "ActuaryCommunicationType"),
        _scalar("risk_based_contract", 19, _BOOL, optional=True),
        _enum("population_covered", 20, "PopulationCovered"),
        _msg("rate_infos", 50, "RateInfo", repeated=True),
    ],
}


def _qualified(type_name: str) -> str:
    if type_name.startswith("."):
        return type_name
    return f".{PACKAGE}.{type_name}"


def _add_field(message: descriptor_pb2.DescriptorProto, spec: FieldSpec) -> None:
    name, number, ftype, type_name, repeated, optional = spec
    field = message.field.add(name=name, number=number, type=ftype)
    field.label = _F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL
    if type_name is not None:
        field.type_name = _qualified(type_name)
    if optional:
        # proto3 "optional": presence is tracked through a synthetic oneof
        field.proto3_optional = True
        field.oneof_index = len(message.oneof_decl)
        message.oneof_decl.add(name=f"_{name}")


def build_file_descriptor_proto() -> descriptor_pb2.FileDescriptorProto:
    """Return the FileDescriptorProto for the form data schema."""
    fdp = descriptor_pb2.FileDescriptorProto(name=FILE_NAME, package=PACKAGE, syntax="proto3")
    fdp.dependency.append("google/protobuf/timestamp.proto")
    for enum_name, values in ENUMS.items():
        enum = fdp.enum_type.add(name=enum_name)
        for value_name, number in values:
            enum.value.add(name=value_name, number=number)

    declared: Dict[str, descriptor_pb2.DescriptorProto] = {}
    for dotted, fields in MESSAGES.items():
        parent_name, _, short_name = dotted.rpartition(".")
        container = declared[parent_name].nested_type if parent_name else fdp.message_type
        message = container.add(name=short_name)
        for spec in fields:
            _add_field(message, spec)
        declared[dotted] = message
    return fdp


def _register() -> descriptor_pool.DescriptorPool:
    pool = descriptor_pool.Default()
    try:
        pool.FindFileByName(FILE_NAME)
    except KeyError:
        pool.AddSerializedFile(build_file_descriptor_proto().SerializeToString())
    return pool


_POOL = _register()


def message_class(name: str):
    """Concrete message class for a (possibly dotted) message name in this schema."""
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


def enum_descriptor(name: str):
    return _POOL.FindEnumTypeByName(f"{PACKAGE}.{name}")


HealthPlanFormData = message_class("HealthPlanFormData")
Date = message_class("Date")
RateInfo = message_class("RateInfo")
ContractInfo = message_class("ContractInfo")
Document = message_class("Document")
Contact = message_class("Contact")
ActuaryContact = message_class("ActuaryContact")

SUBMISSION_TYPE_CONTRACT_ONLY = 1
SUBMISSION_TYPE_CONTRACT_AND_RATES = 3

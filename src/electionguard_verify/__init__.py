from electionguard_verify.errors import (
    DecryptionMismatch,
    FailureKind,
    FormatError,
    HashMismatch,
    InvalidProof,
    KeyMismatch,
    MalformedValue,
    ParameterError,
    ThresholdError,
    VerificationError,
)
from electionguard_verify.group import ElectionGroup, make_group
from electionguard_verify.report import Failure, VerificationReport
from electionguard_verify.schema import Record
from electionguard_verify.serialize import load_record, record_from_dict
from electionguard_verify.verify import verify_election

__all__ = [
    "DecryptionMismatch",
    "ElectionGroup",
    "Failure",
    "FailureKind",
    "FormatError",
    "HashMismatch",
    "InvalidProof",
    "KeyMismatch",
    "MalformedValue",
    "ParameterError",
    "Record",
    "ThresholdError",
    "VerificationError",
    "VerificationReport",
    "load_record",
    "make_group",
    "record_from_dict",
    "verify_election",
]

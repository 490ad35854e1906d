#!/usr/bin/env python
from enum import Enum


class FailureKind(Enum):
    """
    The kinds of election-integrity violation a verification can report.
    """

    FORMAT_ERROR = "FormatError"
    PARAMETER_ERROR = "ParameterError"
    MALFORMED_VALUE = "MalformedValue"
    HASH_MISMATCH = "HashMismatch"
    INVALID_PROOF = "InvalidProof"
    KEY_MISMATCH = "KeyMismatch"
    THRESHOLD_ERROR = "ThresholdError"
    DECRYPTION_MISMATCH = "DecryptionMismatch"

    def __str__(self) -> str:
        return self.value


class VerificationError(Exception):
    """
    Base class for every failed check. Subclasses pin the reported kind.
    """

    kind: FailureKind = FailureKind.INVALID_PROOF


class FormatError(VerificationError):
    kind = FailureKind.FORMAT_ERROR


class ParameterError(VerificationError):
    kind = FailureKind.PARAMETER_ERROR


class MalformedValue(VerificationError):
    kind = FailureKind.MALFORMED_VALUE


class HashMismatch(VerificationError):
    kind = FailureKind.HASH_MISMATCH


class InvalidProof(VerificationError):
    kind = FailureKind.INVALID_PROOF


class KeyMismatch(VerificationError):
    kind = FailureKind.KEY_MISMATCH


class ThresholdError(VerificationError):
    kind = FailureKind.THRESHOLD_ERROR


class DecryptionMismatch(VerificationError):
    kind = FailureKind.DECRYPTION_MISMATCH

#!/usr/bin/env python
"""
Verification of a complete election record.

`verify_election` runs every check in order: parameters, base hash,
trustee keys, extended base hash, joint key, cast ballots, contest tallies
and spoiled ballots. A failed check is recorded against the smallest entity
it concerns and verification carries on with the rest of the record.

Ballot-level work is done by module-level workers bound with
`functools.partial`, so an optional `multiprocessing` pool can map them.
"""
import functools
from multiprocessing.pool import Pool
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .chaum_pedersen import check_disjunctive_proof, check_selection_sum_proof
from .decryption import check_decrypted_value, check_share
from .elgamal import check_message, elgamal_add
from .errors import (
    FailureKind,
    HashMismatch,
    KeyMismatch,
    MalformedValue,
    ParameterError,
    ThresholdError,
    VerificationError,
)
from .group import ElectionGroup, IntLike, make_group
from .hash import base_hash, extended_base_hash
from .logs import log_info, log_warning
from .report import Failure, VerificationReport
from .schema import (
    CastBallot,
    ContestConfiguration,
    ContestTally,
    DecryptedValue,
    ElGamalMessage,
    Record,
    SpoiledBallot,
    TrusteePublicKey,
)
from .schnorr import check_schnorr_proof

_T = TypeVar("_T")
_R = TypeVar("_R")


def _map(
    pool: Optional[Pool], func: Callable[[_T], _R], inputs: Iterable[_T]
) -> List[_R]:
    inputs = list(inputs)
    if pool is None:
        return [func(item) for item in inputs]
    return pool.map(func=func, iterable=inputs)


def _add_failures(report: VerificationReport, failures: Iterable[Failure]) -> None:
    for failure in failures:
        log_warning("%s: %s %s", failure.entity, failure.kind, failure.message)
        report.failures.append(failure)


def _add_error(
    report: VerificationReport, entity: str, error: VerificationError
) -> None:
    _add_failures(report, [Failure.from_error(entity, error)])


def verify_election(
    record: Record, pool: Optional[Pool] = None
) -> VerificationReport:
    """
    Verify every check over the record and return the full report.
    If the optional `pool` is passed, ballots, tallies and trustees are
    checked in parallel; the report is the same either way.
    """
    report = VerificationReport()

    log_info("Verifying election parameters")
    group = verify_parameters(record, report)
    if group is None:
        return report

    log_info("Verifying base hash")
    verify_base_hash(record, report)

    log_info("Verifying %d trustee public keys", len(record.trustee_public_keys))
    verify_trustee_public_keys(group, record, report, pool)

    log_info("Verifying extended base hash")
    verify_extended_base_hash(record, report)

    log_info("Verifying joint public key")
    verify_joint_public_key(group, record, report)

    log_info("Verifying %d cast ballots", len(record.cast_ballots))
    verify_cast_ballots(group, record, report, pool)

    log_info("Verifying %d contest tallies", len(record.contest_tallies))
    verify_contest_tallies(group, record, report, pool)

    log_info("Verifying %d spoiled ballots", len(record.spoiled_ballots))
    verify_spoiled_ballots(group, record, report, pool)

    log_info(
        "Verification finished: %s", "valid" if report.is_valid else "invalid"
    )
    return report


def verify_parameters(
    record: Record, report: VerificationReport
) -> Optional[ElectionGroup]:
    """
    Check the trustee counts and build the group. Returns `None` when the
    group itself is unusable, since no later check can run without it.
    """
    parameters = record.parameters
    n = parameters.num_trustees
    k = parameters.threshold
    if not 1 <= k <= n:
        _add_error(
            report, "parameters", ParameterError(f"threshold {k} not in [1, {n}]")
        )
    if n != len(record.trustee_public_keys):
        _add_error(
            report,
            "parameters",
            ParameterError(
                f"{n} trustees declared, {len(record.trustee_public_keys)} published"
            ),
        )
    try:
        group = make_group(parameters.prime, parameters.generator)
    except ParameterError as error:
        _add_error(report, "parameters", error)
        return None
    if n >= group.small_prime:
        _add_error(
            report,
            "parameters",
            ParameterError("trustee indices do not fit in the exponent space"),
        )
    return group


def verify_base_hash(record: Record, report: VerificationReport) -> None:
    expected = base_hash(record.parameters, record.contest_configuration())
    if expected != record.base_hash:
        _add_error(
            report,
            "base_hash",
            HashMismatch("recomputed base hash differs from the published one"),
        )


def _verify_trustee(
    group: ElectionGroup,
    threshold: int,
    context: IntLike,
    item: Tuple[int, TrusteePublicKey],
) -> List[Failure]:
    i, trustee = item
    entity = f"trustee_public_keys[{i}]"
    failures = []
    if len(trustee.coefficients) != threshold:
        failures.append(
            Failure.from_error(
                entity,
                ThresholdError(
                    f"expected {threshold} coefficients, found {len(trustee.coefficients)}"
                ),
            )
        )
    for j, coefficient in enumerate(trustee.coefficients):
        try:
            check_schnorr_proof(
                group, coefficient.public_key, coefficient.proof, context
            )
        except VerificationError as error:
            failures.append(
                Failure.from_error(f"{entity}.coefficients[{j}]", error)
            )
    return failures


def verify_trustee_public_keys(
    group: ElectionGroup,
    record: Record,
    report: VerificationReport,
    pool: Optional[Pool] = None,
) -> None:
    """
    Every coefficient key must carry a valid Schnorr proof, bound to the base hash.
    """
    wrapped_func = functools.partial(
        _verify_trustee, group, record.parameters.threshold, record.base_hash
    )
    for failures in _map(pool, wrapped_func, enumerate(record.trustee_public_keys)):
        _add_failures(report, failures)


def verify_extended_base_hash(record: Record, report: VerificationReport) -> None:
    expected = extended_base_hash(record.base_hash, record.trustee_public_keys)
    if expected != record.extended_base_hash:
        _add_error(
            report,
            "extended_base_hash",
            HashMismatch("recomputed extended base hash differs from the published one"),
        )


def verify_joint_public_key(
    group: ElectionGroup, record: Record, report: VerificationReport
) -> None:
    if not group.is_valid_element(record.joint_public_key):
        _add_error(
            report,
            "joint_public_key",
            MalformedValue("joint public key is not a group element"),
        )
        return
    expected = group.mult_p(
        *[
            trustee.public_key
            for trustee in record.trustee_public_keys
            if trustee.coefficients
        ]
    )
    if expected != record.joint_public_key:
        _add_error(
            report,
            "joint_public_key",
            KeyMismatch("joint public key is not the product of the trustee keys"),
        )


def _shape_error(
    ballot: CastBallot, configuration: Sequence[ContestConfiguration]
) -> Optional[str]:
    if len(ballot.contests) != len(configuration):
        return f"ballot has {len(ballot.contests)} contests, election has {len(configuration)}"
    for j, (contest, expected) in enumerate(zip(ballot.contests, configuration)):
        if len(contest.selections) != expected.num_selections:
            return f"contest {j} has {len(contest.selections)} selections, expected {expected.num_selections}"
        if (
            expected.max_selections is not None
            and contest.max_selections != expected.max_selections
        ):
            return f"contest {j} allows {contest.max_selections} selections, expected {expected.max_selections}"
    return None


def _verify_cast_ballot(
    group: ElectionGroup,
    public_key: IntLike,
    context: IntLike,
    configuration: Sequence[ContestConfiguration],
    item: Tuple[int, CastBallot],
) -> List[Failure]:
    i, ballot = item
    entity = f"cast_ballots[{i}]"
    failures = []
    shape_error = _shape_error(ballot, configuration)
    if shape_error is not None:
        failures.append(Failure.from_error(entity, MalformedValue(shape_error)))

    for j, contest in enumerate(ballot.contests):
        contest_entity = f"{entity}.contests[{j}]"
        for k, selection in enumerate(contest.selections):
            try:
                check_disjunctive_proof(
                    group, selection.message, selection.proof, public_key, context
                )
            except VerificationError as error:
                failures.append(
                    Failure.from_error(f"{contest_entity}.selections[{k}]", error)
                )
        try:
            check_selection_sum_proof(
                group,
                [selection.message for selection in contest.selections],
                contest.num_selections_proof,
                public_key,
                contest.max_selections,
                context,
            )
        except VerificationError as error:
            failures.append(Failure.from_error(contest_entity, error))
    return failures


def verify_cast_ballots(
    group: ElectionGroup,
    record: Record,
    report: VerificationReport,
    pool: Optional[Pool] = None,
) -> None:
    """
    Every selection must encrypt zero or one, and every contest must sum to
    its selection limit, both proven against the extended base hash.
    """
    wrapped_func = functools.partial(
        _verify_cast_ballot,
        group,
        record.joint_public_key,
        record.extended_base_hash,
        record.contest_configuration(),
    )
    for failures in _map(pool, wrapped_func, enumerate(record.cast_ballots)):
        _add_failures(report, failures)


def _verify_decrypted_value(
    group: ElectionGroup,
    trustee_public_keys: Sequence[TrusteePublicKey],
    threshold: int,
    context: IntLike,
    entity: str,
    value: DecryptedValue,
    ciphertext: ElGamalMessage,
) -> List[Failure]:
    failures = []
    try:
        check_message(group, ciphertext, "encrypted value")
    except VerificationError as error:
        return [Failure.from_error(entity, error)]

    for i, share in enumerate(value.shares[: len(trustee_public_keys)]):
        try:
            check_share(
                group,
                share,
                ciphertext,
                i + 1,
                trustee_public_keys,
                threshold,
                context,
            )
        except VerificationError as error:
            failures.append(Failure.from_error(f"{entity}.shares[{i}]", error))
    try:
        check_decrypted_value(group, value, ciphertext, len(trustee_public_keys))
    except VerificationError as error:
        failures.append(Failure.from_error(entity, error))
    return failures


def _verify_contest_tally(
    group: ElectionGroup,
    trustee_public_keys: Sequence[TrusteePublicKey],
    threshold: int,
    context: IntLike,
    item: Tuple[int, ContestTally, Sequence[ElGamalMessage]],
) -> List[Failure]:
    j, tally, accumulations = item
    failures = []
    if len(tally.selections) != len(accumulations):
        failures.append(
            Failure.from_error(
                f"contest_tallies[{j}]",
                MalformedValue("tally and ballots disagree on the number of selections"),
            )
        )
    for k, (value, accumulation) in enumerate(zip(tally.selections, accumulations)):
        entity = f"contest_tallies[{j}].selections[{k}]"
        if value.encrypted_value != accumulation:
            failures.append(
                Failure(
                    entity,
                    FailureKind.DECRYPTION_MISMATCH,
                    "encrypted value is not the sum of the cast selections",
                )
            )
        failures.extend(
            _verify_decrypted_value(
                group,
                trustee_public_keys,
                threshold,
                context,
                entity,
                value,
                accumulation,
            )
        )
    return failures


def accumulate_cast_selections(
    group: ElectionGroup, record: Record
) -> List[List[ElGamalMessage]]:
    """
    The homomorphic sum, over all cast ballots, of each selection position
    of each contest tally.
    """
    accumulations = []
    for j, tally in enumerate(record.contest_tallies):
        contest_sums = []
        for k in range(len(tally.selections)):
            contest_sums.append(
                elgamal_add(
                    group,
                    [
                        ballot.contests[j].selections[k].message
                        for ballot in record.cast_ballots
                        if j < len(ballot.contests)
                        and k < len(ballot.contests[j].selections)
                    ],
                )
            )
        accumulations.append(contest_sums)
    return accumulations


def verify_contest_tallies(
    group: ElectionGroup,
    record: Record,
    report: VerificationReport,
    pool: Optional[Pool] = None,
) -> None:
    """
    Every tally must be the sum of the cast selections, correctly decrypted
    by the trustees' shares.
    """
    wrapped_func = functools.partial(
        _verify_contest_tally,
        group,
        record.trustee_public_keys,
        record.parameters.threshold,
        record.extended_base_hash,
    )
    accumulations = accumulate_cast_selections(group, record)
    inputs = [
        (j, tally, contest_sums)
        for j, (tally, contest_sums) in enumerate(
            zip(record.contest_tallies, accumulations)
        )
    ]
    for failures in _map(pool, wrapped_func, inputs):
        _add_failures(report, failures)


def _verify_spoiled_ballot(
    group: ElectionGroup,
    trustee_public_keys: Sequence[TrusteePublicKey],
    threshold: int,
    context: IntLike,
    item: Tuple[int, SpoiledBallot],
) -> List[Failure]:
    i, ballot = item
    failures = []
    for j, contest in enumerate(ballot.contests):
        for k, value in enumerate(contest.selections):
            failures.extend(
                _verify_decrypted_value(
                    group,
                    trustee_public_keys,
                    threshold,
                    context,
                    f"spoiled_ballots[{i}].contests[{j}].selections[{k}]",
                    value,
                    value.encrypted_value,
                )
            )
    return failures


def verify_spoiled_ballots(
    group: ElectionGroup,
    record: Record,
    report: VerificationReport,
    pool: Optional[Pool] = None,
) -> None:
    """
    Every selection of a spoiled ballot must be correctly decrypted.
    """
    wrapped_func = functools.partial(
        _verify_spoiled_ballot,
        group,
        record.trustee_public_keys,
        record.parameters.threshold,
        record.extended_base_hash,
    )
    for failures in _map(pool, wrapped_func, enumerate(record.spoiled_ballots)):
        _add_failures(report, failures)

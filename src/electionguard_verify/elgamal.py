#!/usr/bin/env python
from typing import Iterable

from .group import ElectionGroup
from .schema import ElGamalMessage


def elgamal_add(
    group: ElectionGroup, messages: Iterable[ElGamalMessage]
) -> ElGamalMessage:
    """
    Homomorphically accumulate ciphertexts by multiplying them component-wise.
    The result encrypts the sum of the encrypted exponents; an empty input
    gives the encryption of zero with nonce zero, `(1, 1)`.
    """
    pad = 1
    data = 1
    for message in messages:
        pad = group.mult_p(pad, message.pad)
        data = group.mult_p(data, message.data)
    return ElGamalMessage(pad=int(pad), data=int(data))


def check_message(
    group: ElectionGroup, message: ElGamalMessage, name: str = "message"
) -> None:
    group.check_element(message.pad, f"{name} pad")
    group.check_element(message.data, f"{name} data")

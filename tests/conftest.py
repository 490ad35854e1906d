import pytest

from electionguard_verify.group import ElectionGroup
from electionguard_verify.schema import Record

from tests.election_factory import ElectionFactory, modp_group, toy_group


@pytest.fixture(scope="session")
def toy() -> ElectionGroup:
    return toy_group()


@pytest.fixture(scope="session")
def group() -> ElectionGroup:
    return modp_group()


@pytest.fixture
def factory(group: ElectionGroup) -> ElectionFactory:
    return ElectionFactory(group, num_trustees=3, threshold=2, seed=1)


@pytest.fixture(scope="session")
def valid_record() -> Record:
    """
    Two cast ballots over two contests, one spoiled ballot, and trustee 3
    absent so every decryption includes a rebuilt share.
    """
    factory = ElectionFactory(modp_group(), num_trustees=3, threshold=2, seed=7)
    return factory.build_record(
        cast_votes=[[[1, 0], [0, 1, 1]], [[0, 1], [1, 0, 1]]],
        max_selections=[1, 2],
        spoiled_votes=[[[1, 0], [1, 1, 0]]],
        absent={3},
    )

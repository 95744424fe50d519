from collections.abc import Callable

import pytest

from attestind.core.models import AttestedStub, Meta
from fakes import ATTESTER, RECIPIENT, make_id


@pytest.fixture
def make_stub() -> Callable[..., AttestedStub]:
    def _make(i: int, *, schema_id: str, block_number: int = 100) -> AttestedStub:
        return AttestedStub(
            meta=Meta(block_number=block_number, block_timestamp=1_700_000_000, tx_hash=make_id(10_000 + i), log_index=i),
            attester=ATTESTER,
            recipient=RECIPIENT,
            schema_id=schema_id,
            uid=make_id(i),
        )

    return _make

from pathlib import Path

import pytest

from forgefetch.errors import TransferError
from forgefetch.transport import UrllibTransport


def test_urllib_transport_reads_body(tmp_path: Path) -> None:
    source = tmp_path / "payload.json"
    source.write_bytes(b'{"sha": "abc"}')

    body = UrllibTransport().get(source.as_uri(), headers=[("Authorization", "token t")])

    assert body == b'{"sha": "abc"}'


def test_urllib_transport_wraps_failures(tmp_path: Path) -> None:
    missing = (tmp_path / "missing.tar.gz").as_uri()

    with pytest.raises(TransferError) as excinfo:
        UrllibTransport(timeout=5).get(missing)

    assert excinfo.value.context["url"] == missing
    assert excinfo.value.code == "E_TRANSFER"

"""Tests for the dashd JSON-RPC client, with the HTTP session faked out."""
import aiohttp
import pytest

from chain.errors import BlockNotFoundError, UpstreamError
from node.rpc import DashdRPCNode
from tests.conftest import run
from tests.mock_node import build_block, build_transaction, txid


class FakeResponse:
    def __init__(self, body, status=200):
        self.body = body
        self.status = status

    async def json(self, content_type=None):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Answers RPC calls from a method name to response body table."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []
        self.closed = False

    def post(self, url, json=None):
        self.requests.append(json)
        body = self.responses[json["method"]]
        if isinstance(body, aiohttp.ClientError):
            raise body
        return FakeResponse(body)

    async def close(self):
        self.closed = True


def make_node(responses):
    node = DashdRPCNode("http://127.0.0.1:9998", user="rpc", password="secret")
    node.session = FakeSession(responses)
    return node


def ok(result):
    return {"result": result, "error": None, "id": 1}


def failed(code, message):
    return {"result": None, "error": {"code": code, "message": message}, "id": 1}


HEADER = {
    "hash": "aa" * 32,
    "height": 12,
    "confirmations": 3,
    "chainwork": "00" * 32,
    "difficulty": 2.5,
    "previousblockhash": "bb" * 32,
    "nextblockhash": "cc" * 32,
    "version": 536870912,
    "merkleroot": "dd" * 32,
    "time": 1600000000,
    "mediantime": 1599999000,
    "nonce": 99,
    "bits": "1e0ffff0"
}


def test_refresh_height():
    node = make_node({"getblockcount": ok(1234)})
    assert run(node.refresh_height()) == 1234
    assert node.height == 1234
    assert node.session.requests[0]["params"] == []


def test_block_header_by_height():
    """Test a height is resolved to a hash before fetching the header."""
    node = make_node({"getblockhash": ok("aa" * 32), "getblockheader": ok(HEADER)})

    header = run(node.get_block_header(12))

    assert [r["method"] for r in node.session.requests] == ["getblockhash", "getblockheader"]
    assert node.session.requests[1]["params"] == ["aa" * 32, True]
    assert header.hash == "aa" * 32
    assert header.chain_work == "00" * 32
    assert header.prev_hash == "bb" * 32
    assert header.next_hash == "cc" * 32
    assert header.median_time == 1599999000


def test_block_headers():
    node = make_node({"getblockheaders": ok([HEADER, dict(HEADER, height=13)])})
    headers = run(node.get_block_headers("aa" * 32, 2))
    assert [h.height for h in headers] == [12, 13]
    assert node.session.requests[0]["params"] == ["aa" * 32, 2, True]


def test_block_hashes_by_timestamp_param_order():
    """Test the node receives the high bound first."""
    node = make_node({"getblockhashes": ok(["aa" * 32])})
    assert run(node.get_block_hashes_by_timestamp(100, 200)) == ["aa" * 32]
    assert node.session.requests[0]["params"] == [200, 100]


def test_get_block_parses_raw_hex():
    coinbase = build_transaction(b'\x03/AntPool/')
    raw = build_block([coinbase])
    node = make_node({"getblock": ok(raw.hex())})

    block = run(node.get_block("aa" * 32))

    assert node.session.requests[0]["params"] == ["aa" * 32, 0]
    assert block.hash == "aa" * 32
    assert block.transaction_ids == [txid(coinbase)]


def test_invalid_block_hex():
    node = make_node({"getblock": ok("not hex")})
    with pytest.raises(UpstreamError):
        run(node.get_raw_block("aa" * 32))


@pytest.mark.parametrize("code", [-5, -8])
def test_not_found_codes(code):
    """Test missing blocks and out-of-range heights become not-found errors."""
    node = make_node({"getblockheader": failed(code, "Block not found")})

    with pytest.raises(BlockNotFoundError) as exc_info:
        run(node.get_block_header("aa" * 32))
    assert exc_info.value.code == code
    assert exc_info.value.identifier == "aa" * 32


def test_other_error_codes():
    node = make_node({"getblock": failed(-28, "Loading block index...")})

    with pytest.raises(UpstreamError) as exc_info:
        run(node.get_block("aa" * 32))
    assert not isinstance(exc_info.value, BlockNotFoundError)
    assert exc_info.value.code == -28
    assert exc_info.value.message == "Loading block index..."


def test_transport_error():
    node = make_node({"getblockcount": aiohttp.ClientConnectionError("refused")})

    with pytest.raises(UpstreamError) as exc_info:
        run(node.refresh_height())
    assert exc_info.value.code is None


def test_unexpected_body():
    node = make_node({"getblockcount": ValueError("not json")})
    with pytest.raises(UpstreamError):
        run(node.refresh_height())


def test_close():
    node = make_node({})
    session = node.session
    run(node.close())
    assert session.closed is True
    assert node.session is None

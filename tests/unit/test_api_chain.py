from __future__ import annotations

import pytest

from api.main import create_app
from powchain.core.config import Config
from tests.unit._api_test_client import make_client


@pytest.fixture()
def app(test_config: Config):
    return create_app(test_config)


@pytest.mark.anyio
async def test_index_lists_routes(app):
    async with make_client(app) as ac:
        r = await ac.get("/")
    assert r.status_code == 200
    assert "/blockchain" in r.json()["message"]


@pytest.mark.anyio
async def test_fresh_chain_holds_only_genesis(app):
    async with make_client(app) as ac:
        r = await ac.get("/blockchain")
    assert r.status_code == 200
    body = r.json()
    assert body["difficulty"] == 2
    assert len(body["chain"]) == 1
    genesis = body["chain"][0]
    assert genesis["data"] == "Genesis Block"
    assert genesis["previousHash"] == "0"
    assert genesis["nonce"] == 0


@pytest.mark.anyio
async def test_mine_appends_linked_block(app):
    async with make_client(app) as ac:
        genesis = (await ac.get("/blockchain")).json()["chain"][0]
        r = await ac.post("/mine", json={"data": "Alice pays Bob 10"})
        assert r.status_code == 201
        body = r.json()
        assert body["message"] == "New block mined and added successfully!"
        block = body["newBlock"]
        assert block["data"] == "Alice pays Bob 10"
        assert block["previousHash"] == genesis["hash"]
        assert block["hash"].startswith("00")

        chain = (await ac.get("/blockchain")).json()["chain"]
    assert len(chain) == 2
    assert chain[1] == block


@pytest.mark.anyio
async def test_mine_accepts_message_batches(app):
    messages = [{"sender": "A", "message": "hi"}, {"sender": "B", "message": "hello"}]
    async with make_client(app) as ac:
        r = await ac.post("/mine", json={"data": messages})
    assert r.status_code == 201
    assert r.json()["newBlock"]["data"] == messages


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body,code",
    [
        ({}, "chain.missing_payload"),
        ({"data": ""}, "chain.missing_payload"),
        ({"data": []}, "chain.missing_payload"),
        ({"data": {}}, "chain.missing_payload"),
        ({"data": 5}, "chain.invalid_payload"),
        ({"data": [{"sender": "A"}]}, "chain.invalid_payload"),
    ],
)
async def test_mine_rejects_bad_data_without_growing(app, body, code):
    async with make_client(app) as ac:
        r = await ac.post("/mine", json=body)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == code
        assert len((await ac.get("/blockchain")).json()["chain"]) == 1


@pytest.mark.anyio
async def test_mine_without_body_is_missing_payload(app):
    async with make_client(app) as ac:
        r = await ac.post("/mine")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "chain.missing_payload"


@pytest.mark.anyio
async def test_validate_valid_chain(app):
    async with make_client(app) as ac:
        await ac.post("/mine", json={"data": "one"})
        r = await ac.get("/validate")
    assert r.status_code == 200
    assert r.json() == {"valid": True}


@pytest.mark.anyio
async def test_tamper_then_validate_reports_hash_mismatch(app):
    async with make_client(app) as ac:
        await ac.post("/mine", json={"data": "Alice pays Bob 10"})
        await ac.post("/mine", json={"data": "Bob pays Carol 5"})
        before = (await ac.get("/blockchain")).json()["chain"][1]

        r = await ac.post("/tamper/1", json={"data": "Alice pays Bob 1000"})
        assert r.status_code == 200
        body = r.json()
        assert body["message"] == "Tampered with block 1. Run /validate to see the effect."
        assert body["block"]["data"] == "Alice pays Bob 1000"
        assert body["block"]["hash"] == before["hash"]

        r = await ac.get("/validate")
    report = r.json()
    assert report["valid"] is False
    assert report["reason"] == "hash-mismatch"
    assert report["index"] == 1
    assert "tampering" in report["message"]
    assert report["block"]["data"] == "Alice pays Bob 1000"


@pytest.mark.anyio
@pytest.mark.parametrize("index", ["9", "-1", "abc", "1.5", "%C2%B2"])
async def test_tamper_rejects_bad_index(app, index):
    async with make_client(app) as ac:
        await ac.post("/mine", json={"data": "one"})
        r = await ac.post(f"/tamper/{index}", json={"data": "x"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "chain.invalid_index"


@pytest.mark.anyio
async def test_tamper_rejects_missing_data(app):
    async with make_client(app) as ac:
        await ac.post("/mine", json={"data": "one"})
        r = await ac.post("/tamper/1", json={})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "chain.missing_payload"
        assert (await ac.get("/validate")).json() == {"valid": True}


@pytest.mark.anyio
async def test_mine_and_tamper_structured_record(app):
    async with make_client(app) as ac:
        r = await ac.post("/mine", json={"data": {"from": "Alice", "to": "Bob", "amount": 10}})
        assert r.status_code == 201
        assert r.json()["newBlock"]["data"] == {"from": "Alice", "to": "Bob", "amount": 10}

        await ac.post("/tamper/1", json={"data": {"from": "Alice", "to": "Bob", "amount": 1000}})
        report = (await ac.get("/validate")).json()
    assert report["reason"] == "hash-mismatch"
    assert report["block"]["data"]["amount"] == 1000


@pytest.mark.anyio
async def test_tamper_message_names_the_parsed_index(app):
    async with make_client(app) as ac:
        await ac.post("/mine", json={"data": "one"})
        r = await ac.post("/tamper/01", json={"data": "x"})
    assert r.status_code == 200
    assert r.json()["message"] == "Tampered with block 1. Run /validate to see the effect."

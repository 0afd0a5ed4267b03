import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from shardcli.adapters.kinesis_boto3 import KinesisClient
from shardcli.domain.batching import partition_key
from shardcli.domain.errors import TransportError
from shardcli.domain.models import PollResult, PutResult, Record
from shardcli.domain.value_types import Cursor, ShardId, StreamName

pytestmark = pytest.mark.asyncio

S = StreamName("events")
SHARD = ShardId("shardId-000000000000")


@pytest.fixture
def stubbed():
    client = boto3.client(
        "kinesis",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stub:
        yield KinesisClient(client), stub
        stub.assert_no_pending_responses()


def _shard(shard_id: str) -> dict:
    return {
        "ShardId": shard_id,
        "HashKeyRange": {"StartingHashKey": "0", "EndingHashKey": "1"},
        "SequenceNumberRange": {"StartingSequenceNumber": "1"},
    }


async def test_get_shard_iterator_latest(stubbed):
    kc, stub = stubbed
    stub.add_response(
        "get_shard_iterator",
        {"ShardIterator": "AAAA"},
        {"StreamName": "events", "ShardId": SHARD, "ShardIteratorType": "LATEST"},
    )
    assert await kc.get_shard_iterator(S, SHARD) == "AAAA"


async def test_get_records_maps_payloads_and_next_cursor(stubbed):
    kc, stub = stubbed
    stub.add_response(
        "get_records",
        {
            "Records": [
                {"SequenceNumber": "1", "Data": b"one", "PartitionKey": "k"},
                {"SequenceNumber": "2", "Data": b"", "PartitionKey": "k"},
            ],
            "NextShardIterator": "BBBB",
            "MillisBehindLatest": 12,
        },
        {"ShardIterator": "AAAA"},
    )
    res = await kc.get_records(Cursor("AAAA"))
    assert res == PollResult(records=(b"one", b""), next_cursor=Cursor("BBBB"), millis_behind_latest=12)


async def test_get_records_without_next_iterator_means_drained(stubbed):
    kc, stub = stubbed
    stub.add_response("get_records", {"Records": []}, {"ShardIterator": "AAAA"})
    res = await kc.get_records(Cursor("AAAA"))
    assert res.records == () and res.next_cursor is None


async def test_put_records_request_shape(stubbed):
    kc, stub = stubbed
    recs = [Record(partition_key(b"a"), b"a"), Record(partition_key(b"bc"), b"bc")]
    stub.add_response(
        "put_records",
        {
            "FailedRecordCount": 1,
            "Records": [
                {"SequenceNumber": "1", "ShardId": SHARD},
                {"ErrorCode": "ProvisionedThroughputExceededException", "ErrorMessage": "slow down"},
            ],
        },
        {
            "StreamName": "events",
            "Records": [
                {"Data": b"a", "PartitionKey": partition_key(b"a")},
                {"Data": b"bc", "PartitionKey": partition_key(b"bc")},
            ],
        },
    )
    assert await kc.put_records(S, recs) == PutResult(record_count=2, failed_record_count=1)


async def test_client_error_becomes_transport_error(stubbed):
    kc, stub = stubbed
    stub.add_client_error(
        "get_records",
        service_error_code="ExpiredIteratorException",
        service_message="Iterator expired",
    )
    with pytest.raises(TransportError) as ei:
        await kc.get_records(Cursor("AAAA"))
    err = ei.value
    assert err.operation == "GetRecords"
    assert err.code == "ExpiredIteratorException"
    assert "Iterator expired" in str(err)
    assert isinstance(err.__cause__, ClientError)


async def test_create_and_delete(stubbed):
    kc, stub = stubbed
    stub.add_response("create_stream", {}, {"StreamName": "events", "ShardCount": 2})
    stub.add_response("delete_stream", {}, {"StreamName": "events"})
    await kc.create_stream(S, 2)
    await kc.delete_stream(S)


async def test_list_streams_follows_pagination(stubbed):
    kc, stub = stubbed
    stub.add_response("list_streams", {"StreamNames": ["a", "b"], "HasMoreStreams": True, "NextToken": "t1"}, {})
    stub.add_response("list_streams", {"StreamNames": ["c"], "HasMoreStreams": False}, {"NextToken": "t1"})
    assert await kc.list_streams() == ["a", "b", "c"]


async def test_list_streams_single_page(stubbed):
    kc, stub = stubbed
    stub.add_response("list_streams", {"StreamNames": ["only"], "HasMoreStreams": False}, {})
    assert await kc.list_streams() == ["only"]


async def test_list_shards_follows_next_token(stubbed):
    kc, stub = stubbed
    stub.add_response("list_shards", {"Shards": [_shard("shardId-000000000000")], "NextToken": "n1"},
                      {"StreamName": "events"})
    stub.add_response("list_shards", {"Shards": [_shard("shardId-000000000001")]}, {"NextToken": "n1"})
    assert await kc.list_shards(S) == ["shardId-000000000000", "shardId-000000000001"]


async def test_list_shards_error(stubbed):
    kc, stub = stubbed
    stub.add_client_error("list_shards", service_error_code="ResourceNotFoundException",
                          service_message="Stream events not found")
    with pytest.raises(TransportError, match=r"ListShards failed \(ResourceNotFoundException\)"):
        await kc.list_shards(S)

